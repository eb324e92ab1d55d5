import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from PIL import Image

from paperback.core.book_config import BookConfigError
from paperback.core.config_manager import CONFIG_PATH, IMAGE_SUFFIXES, load_settings
from paperback.geometry.projection import InvalidCameraGeometryError
from paperback.media.box3d.base import describe_projection, generate_book_image, prepare_projection

logger = logging.getLogger("paperback")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="カバー画像から立てた本の3D画像（影・陰影付き）を生成する。",
    )
    parser.add_argument("cover", type=Path, help="カバー画像（表紙のみ / 背表紙付き / 全面）")
    parser.add_argument("-o", "--output", type=Path, help="出力PNG（既定: <cover>_3d.png）")
    parser.add_argument("--config", type=Path, help=f"設定ファイル（既定: {CONFIG_PATH.name}）")
    parser.add_argument("--yaw", type=float, help="本体のY軸回転（度）")
    parser.add_argument("--tilt", type=float, help="カメラのX軸回転（度）")
    parser.add_argument("--open-angle", type=float, help="表紙の開き角（度）")
    parser.add_argument("--no-shadow", action="store_true", help="影を描かない")
    parser.add_argument("--transparent", action="store_true", help="背景を透明にする")
    parser.add_argument("--crop", action="store_true", help="不透明部分で切り抜く")
    parser.add_argument("--geometry", action="store_true", help="描画せず射影結果をJSONで出力する")
    parser.add_argument("--preview", action="store_true", help="プレビューダイアログを開く")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: "list[str] | None" = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cover.suffix.lower() not in IMAGE_SUFFIXES:
        logger.warning("%s does not look like an image file", args.cover)

    try:
        settings = load_settings(args.config)
        changes = {}
        if args.yaw is not None:
            changes["y_angle"] = args.yaw
        if args.tilt is not None:
            changes["x_angle"] = args.tilt
        if args.open_angle is not None:
            changes["partial_open_angle"] = args.open_angle
        book = settings.book.with_changes(**changes)
    except (FileNotFoundError, json.JSONDecodeError, BookConfigError) as e:
        logger.error("cannot load settings: %s", e)
        return 1

    output = args.output or args.cover.with_name(f"{args.cover.stem}_3d.png")

    if args.preview:
        from paperback.media.box3d.dialog import run_preview
        run_preview(args.cover, replace(settings, book=book), args.output)
        return 0

    try:
        cover_img = Image.open(args.cover)
    except OSError as e:
        logger.error("cannot open cover image: %s", e)
        return 1

    try:
        _, projection = prepare_projection(cover_img.size, book, settings.cover)
        if args.geometry:
            json.dump(projection.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
            return 0

        logger.info("render order / lighting: %s", describe_projection(projection))
        result = generate_book_image(
            cover_img,
            book,
            cover=settings.cover,
            shadow=None if args.no_shadow else settings.shadow,
            background=None if args.transparent else settings.background,
            crop=args.crop,
        )
    except (BookConfigError, InvalidCameraGeometryError) as e:
        logger.error("%s", e)
        return 1

    output.parent.mkdir(parents=True, exist_ok=True)
    result.save(output, "PNG")
    logger.info("wrote %s (%dx%d)", output, *result.size)
    return 0


if __name__ == "__main__":
    sys.exit(main())
