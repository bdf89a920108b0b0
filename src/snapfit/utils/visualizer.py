"""
3D debug view of a session, drawn with matplotlib.

Read-only: the visualizer takes a ``GameSession`` and never mutates it.
Axes follow the game's y-up convention; matplotlib's vertical axis shows y.
"""

import io
import os
from typing import List, Optional, Sequence, Tuple

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection
import numpy as np
from matplotlib.colors import to_rgba
from PIL import Image

from snapfit.core.base import PartStatus, Transform
from snapfit.geometry.transform_math import compose_world, quaternion_to_matrix


PART_COLORS = [
    '#FF6B6B',  # red
    '#4ECDC4',  # teal
    '#45B7D1',  # blue
    '#96CEB4',  # green
    '#FFEAA7',  # yellow
    '#FD79A8',  # pink
    '#A29BFE',  # purple
    '#FDCB6E',  # orange
]

SOCKET_COLOR = '#636E72'
HINT_COLOR = '#FDCB6E'


def get_part_color(index: int) -> str:
    return PART_COLORS[index % len(PART_COLORS)]


def _to_plot(points: np.ndarray) -> np.ndarray:
    """Game (x, y, z) with y up -> plot (x, z, y) with the third axis up."""
    return points[..., [0, 2, 1]]


def create_box_faces(pose: Transform, size: float = 0.3) -> List[np.ndarray]:
    """
    Faces of a cube of edge ``size`` centred on ``pose``, rotated by its orientation.

    Returns:
        6 faces of 4 vertices each, in plot coordinates
    """
    d = size / 2.0
    corners = np.array([
        [-d, -d, -d], [d, -d, -d], [d, d, -d], [-d, d, -d],
        [-d, -d, d], [d, -d, d], [d, d, d], [-d, d, d],
    ])
    rotation = quaternion_to_matrix(pose.orientation)
    vertices = _to_plot(corners @ rotation.T + np.asarray(pose.position))
    return [
        vertices[[0, 1, 2, 3]], vertices[[4, 5, 6, 7]],
        vertices[[0, 1, 5, 4]], vertices[[2, 3, 7, 6]],
        vertices[[0, 3, 7, 4]], vertices[[1, 2, 6, 5]],
    ]


def draw_part(ax, pose: Transform, color: str, alpha: float = 0.8, size: float = 0.3):
    faces = create_box_faces(pose, size)
    ax.add_collection3d(Poly3DCollection(
        faces,
        facecolors=to_rgba(color, alpha),
        edgecolors='black',
        linewidths=0.6,
    ))


def draw_frame_axes(ax, transform: Transform, length: float = 0.2, linewidth: float = 1.5):
    """Draw the local x/y/z axes of a transform in red/green/blue."""
    origin = np.asarray(transform.position)
    rotation = quaternion_to_matrix(transform.orientation)
    for column, color in zip(range(3), ('r', 'g', 'b')):
        tip = origin + rotation[:, column] * length
        segment = _to_plot(np.array([origin, tip]))
        ax.plot3D(*segment.T, color=color, linewidth=linewidth)


def _scene_bounds(points: Sequence[Sequence[float]], pad: float = 0.5) -> Tuple[np.ndarray, np.ndarray]:
    if not points:
        return np.array([-1.0, -1.0, 0.0]), np.array([1.0, 1.0, 2.0])
    arr = _to_plot(np.asarray(points, dtype=float))
    return arr.min(axis=0) - pad, arr.max(axis=0) + pad


def visualize_session_3d(session,
                         title: Optional[str] = None,
                         show_attach_points: bool = True,
                         figsize: Tuple[int, int] = (8, 6)) -> plt.Figure:
    """
    Draw sockets, parts (at their visual pose) and attach points.

    Args:
        session: GameSession to draw
        title: Figure title; defaults to the level name
        show_attach_points: Draw each part's attach points in world space
        figsize: Figure size in inches

    Returns:
        matplotlib Figure
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection='3d')
    points: List[Sequence[float]] = []

    hint_position = session.hint_target_position()
    for socket in session.registry.sockets:
        p = _to_plot(np.asarray(socket.position))
        ax.scatter(*p, color=SOCKET_COLOR, marker='^', s=60, depthshade=False)
        ax.text(p[0], p[1], p[2] + 0.08, socket.name, fontsize=7, color=SOCKET_COLOR)
        draw_frame_axes(ax, socket.transform, length=0.15, linewidth=1.0)
        points.append(socket.position)
    if hint_position is not None:
        p = _to_plot(np.asarray(hint_position))
        ax.scatter(*p, color=HINT_COLOR, marker='o', s=300, alpha=0.5, depthshade=False)

    for index, part in enumerate(session.parts):
        pose = session.visual_pose(part.id)
        color = get_part_color(index)
        alpha = 0.95 if part.status == PartStatus.GRABBED else 0.7
        draw_part(ax, pose, color, alpha=alpha)
        label = part.id + (" *" if part.id == session.selected_part_id else "")
        p = _to_plot(np.asarray(pose.position))
        ax.text(p[0], p[1], p[2] + 0.25, label, fontsize=8)
        points.append(pose.position)
        if show_attach_points:
            for attach_point in part.attach_points or []:
                world = compose_world(attach_point.transform, pose)
                draw_frame_axes(ax, world, length=0.12, linewidth=1.0)
                points.append(world.position)

    low, high = _scene_bounds(points)
    span = float(np.max(high - low))
    centre = (low + high) / 2.0
    ax.set_xlim(centre[0] - span / 2, centre[0] + span / 2)
    ax.set_ylim(centre[1] - span / 2, centre[1] + span / 2)
    ax.set_zlim(centre[2] - span / 2, centre[2] + span / 2)
    ax.set_xlabel('X')
    ax.set_ylabel('Z')
    ax.set_zlabel('Y')
    if title is None and session.level is not None:
        title = session.level.name
    ax.set_title(title or "snapfit")
    return fig


def render_to_image(fig: plt.Figure, dpi: int = 100) -> Image.Image:
    """Rasterise a figure to an RGB PIL image and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi)
    buf.seek(0)
    img = Image.open(buf).convert("RGB")
    plt.close(fig)
    return img


def render_session(session, width: int = 640, height: int = 480, dpi: int = 100) -> Image.Image:
    fig = visualize_session_3d(session, figsize=(width / dpi, height / dpi))
    img = render_to_image(fig, dpi=dpi)
    if img.size != (width, height):
        img = img.resize((width, height))
    return img
