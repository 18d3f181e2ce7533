import logging
import sys

from config.logging_config import configure_logging, resolve_log_level, resolve_module_levels
from services.exceptions import DecodeError, DimensionMismatchError
from services.raster_export import RasterExport
from services.viewer_session import ViewerSession
from services.volume_loader import VolumeLoader, get_file_format

USAGE = (
    "Usage:\n"
    "  python main.py IMAGE LABEL [SLICE] [OUTPUT_DIR]\n"
    "  python main.py MESH.stl"
)

logger = logging.getLogger("main")


def show_mesh(loader: VolumeLoader, path: str) -> None:
    mesh = loader.load_mesh(path)
    box = mesh.bounding_box()
    logger.info("Triangles: %d, vertices: %d", mesh.triangle_count, mesh.vertex_count)
    logger.info("Bounding box min=%s max=%s size=%s", box.min, box.max, box.size)


def export_slice(loader: VolumeLoader, image_path: str, label_path: str, slice_arg, output_dir: str) -> None:
    session = ViewerSession()
    session.load_pair(loader.load_volume(image_path), loader.load_volume(label_path))
    slice_index = int(slice_arg) if slice_arg is not None else None
    raster = session.render(slice_index)
    logger.info("Coupe %s rendue (%dx%d)", session.slice_info(), raster.width, raster.height)
    RasterExport().save_png(raster, output_dir)


def main(argv) -> int:
    configure_logging(resolve_log_level(), module_levels=resolve_module_levels())

    mesh_mode = len(argv) == 1 and get_file_format(argv[0]) == "stl"
    if not mesh_mode and not 2 <= len(argv) <= 4:
        print(USAGE, file=sys.stderr)
        return 2

    loader = VolumeLoader()
    try:
        if mesh_mode:
            show_mesh(loader, argv[0])
        else:
            slice_arg = argv[2] if len(argv) > 2 else None
            output_dir = argv[3] if len(argv) > 3 else "."
            export_slice(loader, argv[0], argv[1], slice_arg, output_dir)
    except (DecodeError, DimensionMismatchError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
