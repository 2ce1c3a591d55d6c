"""Camera presets and the fly-over transition between them.

The transition is an explicit state machine: ``begin_transition`` captures
the live pose and computes a raised waypoint, ``advance`` moves it forward by
one frame delta and returns the next state.  States are immutable, so a
presentation layer simply keeps the latest one.

Orbit controls stay disabled while a transition runs and are re-enabled when
progress reaches 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .parameters import PolyhouseConfig
from .vec3 import Vector3, lerp, midpoint, non_negative, quadratic_bezier

__all__ = [
    "TRANSITION_DURATION_S",
    "CameraPose",
    "CameraTransition",
    "camera_preset",
    "ease_in_out_quart",
    "idle_transition",
    "begin_transition",
    "advance",
    "CameraDirector",
]

TRANSITION_DURATION_S = 2.0
WAYPOINT_LIFT_RATIO = 1.5  # of ridge height, above the higher endpoint

IDLE = "idle"
TRANSITIONING = "transitioning"


@dataclass(slots=True, frozen=True)
class CameraPose:
    position: Vector3
    target: Vector3
    fov: float


@dataclass(slots=True, frozen=True)
class CameraTransition:
    """Camera state; ``pose`` is always the live camera."""

    phase: str
    pose: CameraPose
    start_pose: Optional[CameraPose] = None
    target_pose: Optional[CameraPose] = None
    waypoint: Optional[Vector3] = None
    elapsed: float = 0.0
    duration: float = TRANSITION_DURATION_S
    progress: float = 0.0

    @property
    def controls_enabled(self) -> bool:
        return self.phase == IDLE

    @property
    def is_transitioning(self) -> bool:
        return self.phase == TRANSITIONING


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

# (position factors over width/ridge/length, target y factor over ridge, fov)
_PRESETS: Dict[str, tuple] = {
    "naturally-ventilated": ((1.2, 2.2, 1.4), 0.4, 45.0),
    "climate-controlled": ((-0.8, 1.8, 1.6), 0.3, 50.0),
    "shade-net": ((1.5, 2.5, 0.8), 0.5, 42.0),
}
_DEFAULT_PRESET = "naturally-ventilated"


def camera_preset(config: PolyhouseConfig) -> CameraPose:
    """Viewing pose for the polyhouse type; other types share the default."""
    (fx, fy, fz), target_y, fov = _PRESETS.get(config.polyhouse_type, _PRESETS[_DEFAULT_PRESET])
    width = non_negative(config.width)
    length = non_negative(config.length)
    ridge = non_negative(config.ridge_height)
    return CameraPose(
        position=(width * fx, ridge * fy, length * fz),
        target=(0.0, ridge * target_y, 0.0),
        fov=fov,
    )


def ease_in_out_quart(t: float) -> float:
    if t < 0.5:
        return 8.0 * t * t * t * t
    return 1.0 - math.pow(-2.0 * t + 2.0, 4) / 2.0


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


def idle_transition(pose: CameraPose) -> CameraTransition:
    return CameraTransition(phase=IDLE, pose=pose)


def begin_transition(
    state: CameraTransition,
    target_pose: CameraPose,
    ridge_height: float,
) -> CameraTransition:
    """Start a fly-over from the live pose; overwrites any transition in flight."""
    start = state.pose
    mid = midpoint(start.position, target_pose.position)
    lift = non_negative(ridge_height) * WAYPOINT_LIFT_RATIO
    waypoint = (mid[0], max(start.position[1], target_pose.position[1]) + lift, mid[2])
    return CameraTransition(
        phase=TRANSITIONING,
        pose=start,
        start_pose=start,
        target_pose=target_pose,
        waypoint=waypoint,
        elapsed=0.0,
        duration=state.duration,
        progress=0.0,
    )


def advance(state: CameraTransition, delta: float) -> CameraTransition:
    """Advance one frame of ``delta`` seconds."""
    if state.phase != TRANSITIONING or state.start_pose is None or state.target_pose is None:
        return state

    step = delta if math.isfinite(delta) and delta > 0 else 0.0
    elapsed = state.elapsed + step
    progress = min(elapsed / state.duration, 1.0) if state.duration > 0 else 1.0

    if progress >= 1.0:
        return CameraTransition(
            phase=IDLE,
            pose=state.target_pose,
            elapsed=elapsed,
            duration=state.duration,
            progress=1.0,
        )

    t = ease_in_out_quart(progress)
    start, end = state.start_pose, state.target_pose
    waypoint = state.waypoint if state.waypoint is not None else midpoint(start.position, end.position)
    pose = CameraPose(
        position=quadratic_bezier(start.position, waypoint, end.position, t),
        target=lerp(start.target, end.target, t),
        fov=start.fov + (end.fov - start.fov) * t,
    )
    return replace(state, pose=pose, elapsed=elapsed, progress=progress)


class CameraDirector:
    """Tracks the configuration and flies to a new preset on a type change."""

    def __init__(self, config: PolyhouseConfig, duration: float = TRANSITION_DURATION_S):
        self.polyhouse_type = config.polyhouse_type
        self.state = replace(idle_transition(camera_preset(config)), duration=duration)

    @property
    def pose(self) -> CameraPose:
        return self.state.pose

    @property
    def controls_enabled(self) -> bool:
        return self.state.controls_enabled

    def update(self, config: PolyhouseConfig) -> bool:
        """Start a transition if the polyhouse type changed; returns whether it did."""
        if config.polyhouse_type == self.polyhouse_type:
            return False
        self.polyhouse_type = config.polyhouse_type
        self.state = begin_transition(self.state, camera_preset(config), config.ridge_height)
        return True

    def tick(self, delta: float) -> bool:
        """Advance one frame; returns True on the frame the transition completes."""
        was_running = self.state.is_transitioning
        self.state = advance(self.state, delta)
        return was_running and self.state.controls_enabled
