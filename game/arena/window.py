"""
Arcade window: draws an ArenaSession and feeds it keyboard intents

    python -m game.arena.window

Controls: WASD / arrows move, SPACE fires, E (held) recharges at a station,
Q answers the special event, R restarts after game over.
"""

from __future__ import annotations

import math
from typing import Optional

import arcade

from .config import ArenaConfig
from .controls import KeyboardIntents
from .entities import EntityKind
from .session import ArenaSession
from .utils import clamp

KEY_NAMES = {
    arcade.key.W: "up",
    arcade.key.UP: "up",
    arcade.key.S: "down",
    arcade.key.DOWN: "down",
    arcade.key.A: "left",
    arcade.key.LEFT: "left",
    arcade.key.D: "right",
    arcade.key.RIGHT: "right",
    arcade.key.SPACE: "fire",
    arcade.key.E: "recharge",
    arcade.key.Q: "event",
    arcade.key.R: "restart",
}

BAND_COLORS = {
    "low": (220, 80, 80),
    "mid": (240, 200, 80),
    "high": (80, 200, 120),
}


class ArenaWindow(arcade.Window):
    """Arcade window for rendering (and optionally playing) an arena session"""

    def __init__(self, session: ArenaSession, width: int = 800, height: int = 600, interactive: bool = False):
        super().__init__(width, height, "Office Arena - Arcade",
                         update_rate=1 / session.config.tick_rate)
        self.session = session
        self.interactive = interactive
        self.keys = KeyboardIntents()
        self._banner = ""
        self._banner_until = 0.0

        # Colors
        self.AGENT_C = (80, 200, 120)
        self.ENEMY_C = (220, 80, 80)
        self.FLYER_C = (240, 120, 40)
        self.PICKUP_C = (240, 210, 80)
        self.BULLET_C = (180, 180, 220)
        self.DESK_C = (110, 90, 70)
        self.WALL_C = (70, 70, 80)
        self.STATION_C = (60, 120, 200)
        self.STATION_ON_C = (120, 180, 255)
        self.EVENT_C = (200, 60, 200)
        self.HUD_C = (220, 220, 220)

    # ----------------------------
    # Coordinates
    # ----------------------------

    def _scale(self) -> float:
        w, h = self.session.layout.bounds()
        return min(self.width / w, (self.height - 50) / h)

    def _to_screen(self, x: float, y: float):
        # Arena y grows downward, arcade y grows upward
        s = self._scale()
        return x * s, (self.height - 50) - y * s

    def _rect(self, cx: float, cy: float, w: float, h: float, color) -> None:
        s = self._scale()
        sx, sy = self._to_screen(cx, cy)
        hw, hh = w * s / 2, h * s / 2
        arcade.draw_lrbt_rectangle_filled(sx - hw, sx + hw, sy - hh, sy + hh, color)

    def _circle(self, x: float, y: float, r: float, color) -> None:
        sx, sy = self._to_screen(x, y)
        arcade.draw_circle_filled(sx, sy, max(1.0, r * self._scale()), color)

    # ----------------------------
    # Drawing
    # ----------------------------

    def on_draw(self):
        """Draw the current game state"""
        self.clear()
        arcade.set_background_color((18, 18, 22))
        session = self.session
        registry = session.registry

        for station in registry.entities(EntityKind.STATION):
            color = self.STATION_ON_C if station.recharging else self.STATION_C
            self._rect(station.x, station.y, station.width, station.height, color)

        for obstacle in registry.entities(EntityKind.OBSTACLE):
            color = self.WALL_C if obstacle.border else self.DESK_C
            self._rect(obstacle.x, obstacle.y, obstacle.width, obstacle.height, color)

        for desk in registry.entities(EntityKind.EVENT_DESK):
            self._rect(desk.x, desk.y, desk.width, desk.height, self.EVENT_C)

        for p in registry.entities(EntityKind.PICKUP):
            self._circle(p.x, p.y, p.radius, self.PICKUP_C)
        for e in registry.entities(EntityKind.GROUND_ADVERSARY):
            self._circle(e.x, e.y, e.radius, self.ENEMY_C)
        for f in registry.entities(EntityKind.FLYING_ADVERSARY):
            self._circle(f.x, f.y, f.radius, self.FLYER_C)
        for b in registry.entities(EntityKind.PROJECTILE):
            self._circle(b.x, b.y, b.radius, self.BULLET_C)

        player = session.player
        if player.visible:
            color = self.HUD_C if player.is_invulnerable(session.state.now_ms) else self.AGENT_C
            self._circle(player.x, player.y, player.radius, color)
            self._draw_event_pointer()

        self._draw_hud()

    def _draw_event_pointer(self) -> None:
        player = self.session.player
        heading = self.session.director.event_pointer_heading(player.x, player.y)
        if heading is None:
            return
        reach = player.radius + 14
        tip_x = player.x + math.cos(heading) * reach
        tip_y = player.y + math.sin(heading) * reach
        sx, sy = self._to_screen(player.x, player.y)
        tx, ty = self._to_screen(tip_x, tip_y)
        arcade.draw_line(sx, sy, tx, ty, self.EVENT_C, 3)

    def _draw_bar(self, x0: float, y0: float, meter, label: str) -> None:
        bar_w, bar_h = 180, 10
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        fill = bar_w * clamp(meter.percentage(), 0, 1)
        if fill > 0:
            arcade.draw_lrbt_rectangle_filled(x0, x0 + fill, y0, y0 + bar_h, BAND_COLORS[meter.band()])
        arcade.draw_text(label, x0 + bar_w + 8, y0 - 2, self.HUD_C, 10)

    def _draw_hud(self) -> None:
        session = self.session
        state = session.state
        player = session.player

        self._draw_bar(12, self.height - 22, player.health, "HP")
        self._draw_bar(12, self.height - 40, player.energy, "EN")

        txt = (f"Wave: {state.wave}  Kills: {state.kills}  Score: {state.score}  "
               f"Mode: {state.mode.value}")
        arcade.draw_text(txt, 260, self.height - 30, self.HUD_C, 14)

        if state.game_over:
            arcade.draw_text("GAME OVER - press R to restart", self.width / 2, self.height / 2,
                             self.ENEMY_C, 24, anchor_x="center")
        elif self._banner and state.now_ms < self._banner_until:
            arcade.draw_text(self._banner, self.width / 2, self.height / 2,
                             self.FLYER_C, 24, anchor_x="center")

    # ----------------------------
    # Input / update (interactive play)
    # ----------------------------

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == arcade.key.ESCAPE:
            self.close()
            return
        name = KEY_NAMES.get(symbol)
        if name:
            self.keys.press(name)

    def on_key_release(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name:
            self.keys.release(name)

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        events = self.session.tick(self.keys.poll())
        for event in events:
            if event.name == "rush_started":
                self._banner = f"RUSH! wave {event.data['wave']}"
                self._banner_until = self.session.state.now_ms + event.data["banner_ms"]
            elif event.name == "special_event_started":
                self._banner = "Reach the glowing desk and press Q"
                self._banner_until = self.session.state.now_ms + 3000
            elif event.name == "game_over":
                print(f"Game over at wave {event.data['wave']}: "
                      f"{event.data['kills']} kills, score {event.data['score']}")
                print(event.data["message"])


def play(config: Optional[ArenaConfig] = None, seed: Optional[int] = None):
    """Play the arena with the keyboard"""
    session = ArenaSession(config, seed=seed)
    window = ArenaWindow(session, interactive=True)
    print("WASD/arrows move, SPACE fire, E recharge, Q event, R restart, ESC quit")
    arcade.run()
    return window


if __name__ == "__main__":
    play()
