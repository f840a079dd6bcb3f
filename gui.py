"""
gui.py

Window, toolbar and mouse handling for the gravity simulator.

- Left click adds a body at the pointer using the toolbar settings.
- Right click removes the most recently added body.
- Sliders pick mass and initial velocity of the next body, the color
  button opens a color picker.

No physics lives here: every input becomes a command for the
SimulationContext, which applies it before the next step.
"""

import argparse
import logging
import sys
import tkinter as tk
from tkinter import colorchooser

import ttkbootstrap as tb

from config import SimConfig, configure_logging, load_config
from controls import (
    AddBody, RemoveLast, SimulationContext,
    hex_to_rgb, rgb_to_hex, screen_to_world, world_to_screen,
)

logger = logging.getLogger("gravity_sim.gui")

MIN_DRAW_DIAMETER = 2


class GravitySimApp:
    def __init__(self, root, config: SimConfig = None):
        self.root = root
        self.config = config or SimConfig()
        self.root.title(self.config.title)
        self.root.resizable(self.config.resizable, self.config.resizable)

        style = tb.Style(theme="darkly")
        self.root.configure(bg=style.colors.bg)

        # sim state
        self.context = SimulationContext(gravity=self.config.gravity, v_max=self.config.v_max)
        self.context.settings.mass = self.config.default_mass

        # Canvas
        self.canvas = tk.Canvas(root, width=self.config.width, height=self.config.height,
                                bg=self.config.background, highlightthickness=0)
        self.canvas.pack(fill="both", expand=True)
        self.body_ids = []

        # Toolbar
        self._build_toolbar()
        self._bind_events()

        # start loop
        self.root.after(self.config.frame_ms, self.update_loop)

    # ------------- toolbar -------------
    def _build_toolbar(self):
        ctrl = tb.Frame(self.root)
        ctrl.pack(fill="x", pady=6)

        self.pause_btn = tb.Button(ctrl, text="Pause", bootstyle="outline-pink", command=self.toggle_pause)
        self.pause_btn.pack(side="left", padx=6)

        self.clear_btn = tb.Button(ctrl, text="Clear", bootstyle="outline-secondary", command=self.clear)
        self.clear_btn.pack(side="left", padx=6)

        self.color_btn = tb.Button(ctrl, text="Color", bootstyle="info", command=self.pick_color)
        self.color_btn.pack(side="left", padx=6)
        self.color_swatch = tk.Canvas(ctrl, width=18, height=18, highlightthickness=0,
                                      bg=rgb_to_hex(self.context.settings.color))
        self.color_swatch.pack(side="left", padx=2)

        sliders = tb.Frame(self.root)
        sliders.pack(fill="x", pady=(0, 6))

        lo, hi = self.config.mass_range
        self.mass_var = tk.DoubleVar(value=min(max(self.config.default_mass, lo), hi))
        self._add_slider(sliders, "Mass", self.mass_var, lo, hi, 0)

        vlo, vhi = self.config.velocity_range
        self.vx_var = tk.DoubleVar(value=0.0)
        self.vy_var = tk.DoubleVar(value=0.0)
        self._add_slider(sliders, "Vel x", self.vx_var, vlo, vhi, 1)
        self._add_slider(sliders, "Vel y", self.vy_var, vlo, vhi, 2)
        self.on_settings_changed()

    def _add_slider(self, parent, text, var, lo, hi, row):
        tb.Label(parent, text=text).grid(row=row, column=0, sticky="w", padx=6)
        tb.Scale(parent, from_=lo, to=hi, variable=var, orient="horizontal", length=300,
                 bootstyle="info", command=lambda _value: self.on_settings_changed()).grid(row=row, column=1, padx=6)
        value = tb.Label(parent, width=7)
        value.grid(row=row, column=2, sticky="e", padx=6)
        var.trace_add("write", lambda *_: value.config(text=f"{var.get():.2f}"))
        value.config(text=f"{var.get():.2f}")

    def on_settings_changed(self):
        settings = self.context.settings
        settings.mass = float(self.mass_var.get())
        settings.velocity = (float(self.vx_var.get()), float(self.vy_var.get()))

    def pick_color(self):
        current = rgb_to_hex(self.context.settings.color)
        _rgb, hex_value = colorchooser.askcolor(color=current, parent=self.root, title="Planet color")
        if hex_value is None:
            return
        self.context.settings.color = hex_to_rgb(hex_value)
        self.color_swatch.configure(bg=hex_value)

    # ------------- events -------------
    def _bind_events(self):
        self.canvas.bind("<Button-1>", self._on_add)
        self.canvas.bind("<Button-3>", self._on_remove)
        if sys.platform == "darwin":
            self.canvas.bind("<Button-2>", self._on_remove)

    def _on_add(self, event):
        pos = self.screen_to_world(event.x, event.y)
        self.context.submit(AddBody.from_settings(pos, self.context.settings))

    def _on_remove(self, event):
        self.context.submit(RemoveLast())

    def _canvas_size(self):
        # Tk reports 1x1 until the window is mapped
        w = self.canvas.winfo_width()
        h = self.canvas.winfo_height()
        if w <= 1 or h <= 1:
            return self.config.width, self.config.height
        return w, h

    def screen_to_world(self, sx, sy):
        return screen_to_world(sx, sy, *self._canvas_size())

    def world_to_screen(self, wx, wy):
        return world_to_screen(wx, wy, *self._canvas_size())

    # ------------- main loop -------------
    def update_loop(self):
        try:
            self.context.step()
            self.draw()
        except Exception:
            logger.exception("Simulation error")
        self.root.after(self.config.frame_ms, self.update_loop)

    def draw(self):
        # one oval per body, created or deleted to match the registry
        while len(self.body_ids) > len(self.context.registry):
            self.canvas.delete(self.body_ids.pop())
        while len(self.body_ids) < len(self.context.registry):
            self.body_ids.append(self.canvas.create_oval(0, 0, 1, 1, outline=""))

        items = iter(self.body_ids)

        def draw_body(position, mass, color):
            sx, sy = self.world_to_screen(position[0], position[1])
            r = max(MIN_DRAW_DIAMETER, mass / 10.0) / 2.0
            item = next(items)
            self.canvas.coords(item, sx - r, sy - r, sx + r, sy + r)
            self.canvas.itemconfig(item, fill=rgb_to_hex(color))

        self.context.for_each_body(draw_body)

    def toggle_pause(self):
        self.context.paused = not self.context.paused
        self.pause_btn.config(text="Resume" if self.context.paused else "Pause")

    def clear(self):
        self.context.clear()
        for item in self.body_ids:
            self.canvas.delete(item)
        self.body_ids = []


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Interactive N-body gravity simulation")
    p.add_argument("--config", type=str, default=None, help="JSON config file (overrides defaults)")
    p.add_argument("--width", type=int, default=None)
    p.add_argument("--height", type=int, default=None)
    p.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ...")
    return p.parse_args(argv)


def build_config(args) -> SimConfig:
    data = {}
    if args.config:
        data.update(vars(load_config(args.config)))
    for key in ("width", "height", "log_level"):
        value = getattr(args, key)
        if value is not None:
            data[key] = value
    return SimConfig.from_dict(data)


def main(argv=None):
    args = parse_args(argv)
    try:
        config = build_config(args)
        configure_logging(config.log_level)
    except (OSError, ValueError) as e:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", e)
        return 2

    root = tb.Window(themename="darkly")
    GravitySimApp(root, config)
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
