"""
Plot the voxels a LUT marks as observed, coloured by the camera that sees them.

Usage:
    python scripts/vis_lut.py --lut lut.npz --output docs/visualizations/lut.html
"""

import argparse
import os
import sys
from pathlib import Path

import numpy as np
import plotly.graph_objects as go

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lut import LUTResult


def parse_args():
    parser = argparse.ArgumentParser(description="Visualize voxel-to-camera assignment")
    parser.add_argument("--lut", type=str, required=True, help="LUT .npz written by build_lut.py")
    parser.add_argument("--output", type=str, default="docs/visualizations/lut.html",
                        help="Output HTML path")
    parser.add_argument("--max_points", type=int, default=50000,
                        help="Subsample observed voxels to at most this many markers")
    return parser.parse_args()


def create_lut_figure(result: LUTResult, max_points: int = 50000) -> go.Figure:
    """3D scatter of observed voxel centres, coloured by camera index."""
    offsets = np.flatnonzero(result.valid_mask)
    step = max(1, len(offsets) // max_points)
    offsets = offsets[::step]

    centers = result.grid.centers(offsets)
    cams = result.camera_index[offsets]

    fig = go.Figure(data=[go.Scatter3d(
        x=centers[:, 0], y=centers[:, 1], z=centers[:, 2],
        mode='markers',
        marker=dict(
            size=2,
            color=cams,
            colorscale='Rainbow',
            cmin=0,
            cmax=max(result.n_images - 1, 1),
            showscale=True,
            colorbar=dict(title="Camera"),
        ),
        text=[f"camera {c}, pixel {p}" for c, p in zip(cams, result.pixel_index[offsets])],
        hovertemplate="(%{x:.2f}, %{y:.2f}, %{z:.2f})<br>%{text}<extra></extra>",
    )])

    stats = result.coverage()
    fig.update_layout(
        title=f"Voxel-to-camera LUT: {stats['observed']:,} / {stats['total']:,} voxels observed",
        scene=dict(xaxis_title='X', yaxis_title='Y', zaxis_title='Z', aspectmode='data'),
        width=1200,
        height=900,
    )
    return fig


def main():
    args = parse_args()
    result = LUTResult.load(args.lut)
    fig = create_lut_figure(result, args.max_points)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(output_path))
    print(f"Visualization saved to: {output_path}")


if __name__ == "__main__":
    main()
