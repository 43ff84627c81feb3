# src/rasteringest/cli.py
from __future__ import annotations

"""
CLI del motor de ingesta raster.

Comandos:
  - inspect: decodifica un archivo y muestra un resumen JSON.
  - render: decodifica, compone la selección de bandas pedida y guarda PNG.

Ejemplos rápidos:
  python -m rasteringest.cli inspect ./escena.img --companion ./escena.hdr

  python -m rasteringest.cli render ./escena.tif --out ./falso_color.png \
      --mode rgb --rgb 3 2 1
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .composition.di import build_ingest_service, build_settings
from .contracts.core import BandSelection, DisplayMode, RasterFormat
from .contracts.products import RasterDataset
from .services.ingest_service import RasterIngestService

logger = logging.getLogger(__name__)


# ----------------------
# Utilidades locales
# ----------------------

def _load(svc: RasterIngestService, args: argparse.Namespace) -> RasterDataset:
    fmt = RasterFormat(args.format) if args.format else None
    return svc.ingest_path(args.file, args.companion, fmt=fmt)


def _selection_from_args(ds: RasterDataset, args: argparse.Namespace) -> BandSelection:
    sel = BandSelection.default_for(ds.num_bands)
    if args.mode:
        sel = sel.with_changes(display_mode=DisplayMode(args.mode))
    if args.rgb:
        r, g, b = args.rgb
        sel = sel.with_changes(red_band=r, green_band=g, blue_band=b)
    if args.gray is not None:
        sel = sel.with_changes(grayscale_band=args.gray)
    return sel


# ----------------------
# Comandos
# ----------------------

def cmd_inspect(svc: RasterIngestService, args: argparse.Namespace) -> int:
    ds = _load(svc, args)
    print(json.dumps(ds.summary(), indent=2, ensure_ascii=False))
    return 0


def cmd_render(svc: RasterIngestService, args: argparse.Namespace) -> int:
    ds = _load(svc, args)
    sel = _selection_from_args(ds, args)
    image = svc.compositor.composite(ds, sel)
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(svc.compositor.encoder.encode(image.pixels))
    for w in ds.warnings:
        print(f"[WARN] {w}", file=sys.stderr)
    print(str(out))
    return 0


# ----------------------
# Parser
# ----------------------

def _add_input_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", help="raster a importar (.tif, .png, .jpg, .img, .dat)")
    p.add_argument("--companion", help="archivo companion (.hdr o world file)")
    p.add_argument("--format", choices=[f.value for f in RasterFormat], default=None,
                   help="fuerza el decoder (por defecto se detecta por extensión)")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rasteringest", description="Ingesta y render de rasters")
    p.add_argument("--config", help="settings.yaml (si no, variables RASTER_*)")
    p.add_argument("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR")
    sub = p.add_subparsers(dest="cmd", required=True)

    # inspect
    pi = sub.add_parser("inspect", help="resumen JSON del raster decodificado")
    _add_input_args(pi)
    pi.set_defaults(func=cmd_inspect)

    # render
    pr = sub.add_parser("render", help="compone bandas y guarda PNG")
    _add_input_args(pr)
    pr.add_argument("--out", required=True, help="ruta PNG de salida")
    pr.add_argument("--mode", choices=[m.value for m in DisplayMode], default=None)
    pr.add_argument("--rgb", nargs=3, type=int, metavar=("R", "G", "B"), help="bandas 0-based para R G B")
    pr.add_argument("--gray", type=int, default=None, help="banda 0-based para escala de grises")
    pr.set_defaults(func=cmd_render)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        settings = build_settings(Path(args.config) if args.config else None)
        logging.basicConfig(
            level=(args.log_level or settings.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        svc = build_ingest_service(settings)
        return int(args.func(svc, args))
    except KeyboardInterrupt:
        return 130
    except Exception as ex:
        logger.error("%s", ex)
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
