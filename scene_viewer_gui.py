from __future__ import annotations

import argparse
import math
from typing import Optional, Sequence

import customtkinter

from scene import Scene, SceneOptions, parse_duration, setup_logging
from scene.demo import build_demo_scene
from scene.easing import quad_in_out
from shapes import Shape


def spin_frames(spin: str, fps: int) -> int:
    """
    Frame count of one hexagon spin. The spin eases over a fixed span, so an
    endless or unparsable duration is rejected.
    """
    frames = parse_duration(spin, fps)
    if frames <= 0:
        raise ValueError(f"spin duration must be positive: {spin!r}")
    return frames


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments."""
    p = argparse.ArgumentParser(description="Interactive scene viewer: click an item to bring it to the top.")
    p.add_argument("--width", type=int, default=480, help="surface width in pixels")
    p.add_argument("--height", type=int, default=320, help="surface height in pixels")
    p.add_argument("--fps", type=int, default=30, help="animation frame rate")
    p.add_argument("--spin", type=str, default="2s", help="duration of one hexagon spin, e.g. '2s' or '60f'")
    args = p.parse_args(argv)
    if args.fps <= 0:
        p.error("--fps must be positive")
    try:
        spin_frames(args.spin, args.fps)
    except ValueError as e:
        p.error(str(e))
    return args


class SceneViewerApp(customtkinter.CTk):
    """
    Shows the live surface of a demo scene. Left click picks the topmost
    item under the cursor and raises it; right click hides it.
    """
    def __init__(self, args: argparse.Namespace):
        super().__init__()

        self.args = args
        self.scene: Scene = build_demo_scene(args.width, args.height, SceneOptions(loop_fps=args.fps))
        self.selected: Optional[Shape] = None
        self._after_id: Optional[str] = None

        self.title("Scene Viewer")
        self.geometry(f"{args.width + 40}x{args.height + 120}")

        self.setup_ui()
        self.refresh()

    def setup_ui(self) -> None:
        """Configures the static GUI widgets."""
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self.control_frame = customtkinter.CTkFrame(self, height=50)
        self.control_frame.grid(row=0, column=0, padx=10, pady=10, sticky="ew")

        self.status_label = customtkinter.CTkLabel(self.control_frame, text="Click an item", font=("Arial", 14))
        self.status_label.pack(side="left", padx=20)

        self.show_button = customtkinter.CTkButton(
            self.control_frame,
            text="Show All",
            font=("Arial", 14),
            command=self.show_all,
        )
        self.show_button.pack(side="right", padx=10, pady=10)

        self.spin_button = customtkinter.CTkButton(
            self.control_frame,
            text="Spin",
            font=("Arial", 14, "bold"),
            command=self.toggle_spin,
        )
        self.spin_button.pack(side="right", padx=10, pady=10)

        self.image_label = customtkinter.CTkLabel(self, text="")
        self.image_label.grid(row=1, column=0, padx=10, pady=10)
        self.image_label.bind("<Button-1>", self.on_pick)
        self.image_label.bind("<Button-3>", self.on_hide)

    def refresh(self) -> None:
        """Redraws the scene and swaps the displayed image."""
        self.scene.draw()
        image = self.scene.surface.to_image()
        self._ctk_image = customtkinter.CTkImage(image, size=image.size)
        self.image_label.configure(image=self._ctk_image)

    def _surface_point(self, event) -> tuple[int, int]:
        # the label centers the image and both are drawn at widget scaling
        scaling = customtkinter.ScalingTracker.get_widget_scaling(self)
        w, h = self.scene.surface.size
        ox = (self.image_label.winfo_width() - w * scaling) / 2
        oy = (self.image_label.winfo_height() - h * scaling) / 2
        return int(math.floor((event.x - ox) / scaling)), int(math.floor((event.y - oy) / scaling))

    def _describe(self, item: Shape) -> str:
        for record in self.scene.items:
            if record.drawable is item:
                return record.identifier or type(item).__name__
        return type(item).__name__

    def on_pick(self, event) -> None:
        x, y = self._surface_point(event)
        item = self.scene.get_item_at_point(x, y)
        self.selected = item
        if item is None:
            self.status_label.configure(text=f"({x}, {y}): nothing")
            return
        self.scene.top(item)
        self.status_label.configure(text=f"({x}, {y}): {self._describe(item)} raised")
        self.refresh()

    def on_hide(self, event) -> None:
        x, y = self._surface_point(event)
        item = self.scene.get_item_at_point(x, y)
        if item is None:
            return
        item.hide()
        self.status_label.configure(text=f"({x}, {y}): {self._describe(item)} hidden")
        self.refresh()

    def show_all(self) -> None:
        for item in self.scene.drawables():
            item.show()
        self.status_label.configure(text="All items visible")
        self.refresh()

    def spin_hexagon(self, scene: Scene, frame: int, duration: int) -> None:
        hexagon = scene.get("hexagon")
        if hexagon is not None and duration > 0:
            hexagon.rotate_by(quad_in_out(360, frame, duration))

    def toggle_spin(self) -> None:
        if self.scene.animating:
            self.scene.stop()
            if self._after_id is not None:
                self.after_cancel(self._after_id)
                self._after_id = None
            self.spin_button.configure(text="Spin")
            return
        self.scene.animate(self.spin_hexagon, spin_frames(self.args.spin, self.scene.options.loop_fps))
        self.spin_button.configure(text="Stop")
        self.tick()

    def tick(self) -> None:
        """Advances the animation one frame and schedules the next one."""
        if not self.scene.animating:
            self.spin_button.configure(text="Spin")
            self._after_id = None
            return
        self.scene.loop()
        image = self.scene.surface.to_image()
        self._ctk_image = customtkinter.CTkImage(image, size=image.size)
        self.image_label.configure(image=self._ctk_image)
        self._after_id = self.after(max(1, 1000 // self.scene.options.loop_fps), self.tick)


def main() -> None:
    """Entry point for the GUI application."""
    customtkinter.set_appearance_mode("System")
    customtkinter.set_default_color_theme("blue")

    args = parse_args()
    setup_logging()

    app = SceneViewerApp(args)
    app.mainloop()

    print("Closing application.")


if __name__ == "__main__":
    main()
