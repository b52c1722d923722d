#!/usr/bin/env python3
# scripts/plot_dag.py

from __future__ import annotations

from pathlib import Path
import sys
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Dict, Optional, Tuple
import typer
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch
from matplotlib.lines import Line2D
import networkx as nx

from flowsmith.builder.scenarios import build, supported_categories
from flowsmith.errors import FlowsmithError
from flowsmith.utils.graph import build_graph
from flowsmith.utils.io import save_fig
from flowsmith.utils.logger import log


app = typer.Typer(help="Plot the graph of a generated scenario workflow.")

# ---------- color/theme ----------
BASE_NODE = "#5B8FD9"    # regular node: blue
TRIGGER_NODE = "#2AA876" # trigger: green
BRANCH_NODE = "#F4A259"  # conditional: orange
EDGE_BASE = "#888888"
FONT_FAMILY = "DejaVu Sans"
PORT_LABELS = {0: "true", 1: "false"}

# n8n canvas units -> plot units
SCALE = 1.0 / 200.0
BOX_W, BOX_H = 0.75, 0.32


def _canvas_positions(G: nx.MultiDiGraph) -> Dict[str, Tuple[float, float]]:
    """Use the document's own positions; n8n's y axis points down."""
    return {
        n: (data["position"][0] * SCALE, -data["position"][1] * SCALE)
        for n, data in G.nodes(data=True)
    }


def _draw_rounded_node(ax, xy, text, facecolor, edgecolor="#3c3c3c"):
    """Draw a rounded box with a centered label."""
    x, y = xy
    box = FancyBboxPatch(
        (x - BOX_W / 2, y - BOX_H / 2), BOX_W, BOX_H,
        boxstyle="round,pad=0.03,rounding_size=0.05",
        linewidth=1.2, edgecolor=edgecolor, facecolor=facecolor, zorder=2,
    )
    ax.add_patch(box)
    ax.text(x, y, text, ha="center", va="center", fontsize=8, zorder=3)


def _node_color(data: dict) -> str:
    if data.get("trigger"):
        return TRIGGER_NODE
    if data.get("type") == "n8n-nodes-base.if":
        return BRANCH_NODE
    return BASE_NODE


@app.command()
def plot(
    scenario: str = typer.Option(..., "--scenario", "-s", help=f"One of: {', '.join(supported_categories())}"),
    name: str = typer.Option("Preview", "--name", "-n", help="Workflow name used as title"),
    out: Path = typer.Option(Path("out/dag.png"), "--out", "-o", help="Output image path"),
    title: Optional[str] = typer.Option(None, "--title", help="Figure title"),
    show_legend: bool = typer.Option(True, "--legend/--no-legend", help="Show legend"),
):
    """Plot a scenario graph with rounded nodes and labelled conditional ports."""
    matplotlib.rcParams["font.family"] = FONT_FAMILY

    try:
        document = build(scenario, name)
    except FlowsmithError as e:
        raise typer.BadParameter(str(e))

    G = build_graph(document)
    log.info(f"graph built: {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
    pos = _canvas_positions(G)

    fig = plt.figure(figsize=(9.0, 4.5), dpi=180)
    ax = plt.gca()
    ax.set_axis_off()
    xs = [x for x, _ in pos.values()]
    ys = [y for _, y in pos.values()]
    ax.set_xlim(min(xs) - BOX_W, max(xs) + BOX_W)
    ax.set_ylim(min(ys) - BOX_H * 2, max(ys) + BOX_H * 2)
    ax.set_aspect("equal")

    arts = nx.draw_networkx_edges(
        G, pos, ax=ax,
        width=1.4,
        alpha=0.8,
        arrows=True,
        arrowstyle="-|>",
        arrowsize=14,
        edge_color=EDGE_BASE,
        min_source_margin=22,
        min_target_margin=22,
    )
    for a in arts or []:
        a.set_zorder(1.5)

    # Port labels on multi-output nodes
    for src, dst, data in G.edges(data=True):
        if G.nodes[src].get("type") != "n8n-nodes-base.if":
            continue
        (x0, y0), (x1, y1) = pos[src], pos[dst]
        label = PORT_LABELS.get(data["port"], str(data["port"]))
        ax.text((x0 + x1) / 2, (y0 + y1) / 2 + 0.08, f"[{data['port']}] {label}",
                fontsize=7, ha="center", color="#444444", zorder=3)

    for n, data in G.nodes(data=True):
        _draw_rounded_node(ax, pos[n], n, facecolor=_node_color(data))

    ax.set_title(title or f"{document.name} ({scenario})", fontsize=12, pad=14)

    extra = {}
    if show_legend:
        legend_elems = [
            Line2D([0], [0], marker="s", color="w", label="Trigger", markerfacecolor=TRIGGER_NODE, markersize=10),
            Line2D([0], [0], marker="s", color="w", label="Conditional", markerfacecolor=BRANCH_NODE, markersize=10),
            Line2D([0], [0], marker="s", color="w", label="Other nodes", markerfacecolor=BASE_NODE, markersize=10),
        ]
        leg = fig.legend(handles=legend_elems, loc="lower left", frameon=False, fontsize=8, ncol=3)
        extra = dict(bbox_extra_artists=(leg,))

    save_fig(fig, out, bbox_inches="tight", pad_inches=0.05, **extra)
    log.info(f"[ok] wrote DAG to {out}")


if __name__ == "__main__":
    app()
