# tests/integration/adapters/test_rasterio_geotiff_decoder.py
import numpy as np
import pytest

pytest.importorskip("rasterio")

from rasteringest.adapters.rasterio_geotiff_decoder import RasterioGeoTiffDecoder
from rasteringest.contracts.core import RasterFormat
from rasteringest.contracts.geo import Bounds
from tests.factories import geotiff_bytes

pytestmark = [pytest.mark.integration, pytest.mark.rasterio]


def _data(count=3, h=4, w=5, dtype=np.uint16):
    return np.arange(count * h * w, dtype=dtype).reshape(count, h, w)


def test_georeferenced_three_bands():
    data = _data()
    tif = geotiff_bytes(data, bounds=(30.0, 10.0, 35.0, 14.0), descriptions=["B4", "B3", "B2"])
    d = RasterioGeoTiffDecoder().decode(tif)
    assert (d.width, d.height, d.num_bands) == (5, 4, 3)
    assert d.georef.kind == "embedded"
    assert d.georef.embedded == pytest.approx(Bounds(30.0, 10.0, 35.0, 14.0))
    assert d.band_names == ("B4", "B3", "B2")
    assert d.raw_bands[1].tolist() == data[1].ravel().tolist()


def test_without_georeference():
    d = RasterioGeoTiffDecoder().decode(geotiff_bytes(_data(count=1)))
    assert d.georef.kind == "none"
    assert d.band_names == ("Band 1",)


def test_nodata_masked_as_nan():
    data = np.array([[[0, 10], [20, 0]]], dtype=np.uint8)
    d = RasterioGeoTiffDecoder().decode(geotiff_bytes(data, nodata=0))
    assert np.isnan(d.raw_bands[0, 0]) and np.isnan(d.raw_bands[0, 3])
    raw = RasterioGeoTiffDecoder(mask_nodata=False).decode(geotiff_bytes(data, nodata=0))
    assert raw.raw_bands[0].tolist() == [0, 10, 20, 0]


def test_service_ingest_geotiff(svc):
    data = np.array([[[0, 10], [20, 0]]], dtype=np.uint8)
    ds = svc.ingest(geotiff_bytes(data, bounds=(30.0, 10.0, 32.0, 12.0), nodata=0), "dem.tif")
    assert ds.source_format is RasterFormat.GEOTIFF
    assert ds.normalized_bands[0].tolist() == [0, 0, 255, 0]
    assert ds.bounds == pytest.approx(Bounds(30.0, 10.0, 32.0, 12.0))
    assert ds.warnings == ()


def test_projected_geotiff_falls_back(svc, settings):
    tif = geotiff_bytes(_data(count=1), bounds=(500000.0, 1000000.0, 500150.0, 1000120.0),
                        crs="EPSG:32636")
    ds = svc.ingest(tif, "utm.tif")
    assert ds.bounds == settings.fallback()
    assert ds.warnings and "utm.tif" in ds.warnings[0]
