from __future__ import annotations

import argparse
import logging
import os
import sys

from plotting import render_hit_batches, render_to_file
from scene import SceneOptions, setup_logging
from scene.demo import build_demo_scene


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render the demo scene and optionally pick the item under a point.")
    p.add_argument("--width", type=int, default=480, help="surface width in pixels (default: 480)")
    p.add_argument("--height", type=int, default=320, help="surface height in pixels (default: 320)")
    p.add_argument("--alpha", type=float, default=1.0, help="global alpha applied to every item")
    p.add_argument("--out", type=str, default="plots/scene.png", help="output PNG path")
    p.add_argument("--background", type=str, default=None, help="flatten the render onto this color")
    p.add_argument("--pick", type=int, nargs=2, metavar=("X", "Y"), default=None, help="report the topmost item at X Y")
    p.add_argument("--batches", type=str, default="", help="save a grid of the hit-test batch renders to this path")
    p.add_argument("--log-file", type=str, default=None, help="also write logs to this file")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        options = SceneOptions(global_alpha=args.alpha)
        scene = build_demo_scene(args.width, args.height, options)
    except ValueError as e:
        print(f"Invalid scene settings: {e}", file=sys.stderr)
        sys.exit(2)

    scene.draw()
    render_to_file(scene, args.out, background=args.background)
    print(f"Saved: {args.out}")

    if args.pick is None:
        return
    x, y = args.pick
    item = scene.get_item_at_point(x, y)
    if item is None:
        print(f"({x}, {y}): no item")
    else:
        ident = next((r.identifier for r in scene.items if r.drawable is item), None)
        print(f"({x}, {y}): {ident or 'anonymous'} -> {item!r}")
    if args.batches:
        os.makedirs(os.path.dirname(args.batches) or ".", exist_ok=True)
        render_hit_batches(scene, x, y, out_path=args.batches)
        print(f"Saved: {args.batches}")


if __name__ == "__main__":
    main()
