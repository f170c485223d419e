"""Visualization functions for laid-out family trees."""

from pathlib import Path

import matplotlib.pyplot as plt
import pydot
from matplotlib.patches import FancyBboxPatch

from connectors import build_connectors
from layout import LayoutConfig
from models import Connector, NodePosition, Person
from parsing import calculate_age, parse_date

GENDER_COLORS = {
    "male": "lightblue",
    "female": "lightpink",
}
LINE_COLORS = {
    "spouse": "#f472b6",
    "parent_drop": "#64748b",
    "sibling_bar": "#64748b",
    "child_stub": "#64748b",
}
HIGHLIGHT_COLOR = "#f59e0b"
DIMMED_ALPHA = 0.35


def node_label(person: Person) -> str:
    """Given name, surname, life years and age, one per line."""
    birth = parse_date(person.birth_date)
    death = parse_date(person.death_date)
    birth_year = str(birth.year) if birth else ""
    death_year = str(death.year) if death else ""
    label = f"{person.first_name}\n{person.last_name}\n{birth_year}-{death_year}"

    age = calculate_age(person.birth_date, person.death_date)
    if age is not None:
        label += f"\n{age} yrs" if person.death_date else f"\nAge {age}"
    return label


def node_color(person: Person) -> str:
    return GENDER_COLORS.get(person.gender, "lightgray")


def card_alpha(person_id: str, highlight: set[str] | None) -> float:
    """Cards outside a highlight set are dimmed."""
    if highlight and person_id not in highlight:
        return DIMMED_ALPHA
    return 1.0


def connector_style(c: Connector, highlight: set[str] | None) -> tuple[str, float]:
    """Line colour and width, amber and thicker when the line touches the highlight set."""
    if highlight and (c.source_id in highlight or c.target_id in highlight):
        return HIGHLIGHT_COLOR, 3
    return LINE_COLORS.get(c.kind, "gray"), 2 if c.kind == "spouse" else 1


def plot_layout(
    positions: dict[str, NodePosition],
    output_path: Path | None = None,
    config: LayoutConfig | None = None,
    highlight: set[str] | None = None,
):
    """
    Draw a position map with matplotlib.

    Cards are drawn at their layout coordinates with generations running downwards,
    coloured by gender, and joined by the spouse and parent/child connectors.

    Args:
        positions: Output of calculate_layout
        output_path: Path to save the image (PNG, SVG or PDF). If None, displays interactively.
        config: Card sizes and spacing the layout was computed with
        highlight: Person ids to emphasise; everyone else is dimmed
    """
    config = config or LayoutConfig()
    w, h = config.node_width, config.node_height

    fig, ax = plt.subplots(figsize=(20, 12))

    for c in build_connectors(positions, config):
        color, width = connector_style(c, highlight)
        ax.plot(
            [c.x1, c.x2],
            [c.y1, c.y2],
            color=color,
            linewidth=width,
            solid_capstyle="round",
            zorder=1,
        )

    for person_id, pos in positions.items():
        alpha = card_alpha(person_id, highlight)
        highlighted = bool(highlight) and alpha == 1.0
        ax.add_patch(
            FancyBboxPatch(
                (pos.x - w / 2, pos.y - h / 2),
                w,
                h,
                boxstyle="round,pad=0,rounding_size=12",
                facecolor=node_color(pos.person),
                edgecolor=HIGHLIGHT_COLOR if highlighted else "darkgray",
                linewidth=2 if highlighted else 1,
                alpha=alpha,
                zorder=2,
            )
        )
        ax.text(
            pos.x, pos.y, node_label(pos.person), ha="center", va="center", fontsize=7, alpha=alpha, zorder=3
        )

    if positions:
        xs = [p.x for p in positions.values()]
        ys = [p.y for p in positions.values()]
        ax.set_xlim(min(xs) - w, max(xs) + w)
        ax.set_ylim(max(ys) + h, min(ys) - h)  # ancestors at top
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"Family Tree ({len(positions)} people)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        print(f"Layout saved to {output_path}")
    else:
        plt.show()


def build_dot(positions: dict[str, NodePosition], config: LayoutConfig | None = None) -> pydot.Dot:
    """
    Build a pydot graph whose nodes are pinned at their layout coordinates.

    Coordinates are written in points with y flipped, so `neato -n2` reproduces the
    layout as computed.
    """
    config = config or LayoutConfig()
    P = pydot.Dot(graph_type="graph")
    P.set("splines", "ortho")
    P.set_node_defaults(
        shape="box",
        style="rounded,filled",
        fontsize="10",
        fixedsize="true",
        width=f"{config.node_width / 72:.3f}",
        height=f"{config.node_height / 72:.3f}",
    )

    for person_id, pos in positions.items():
        label = node_label(pos.person).replace("\n", "\\n")
        P.add_node(
            pydot.Node(
                f'"{person_id}"',
                label=f'"{label}"',
                fillcolor=node_color(pos.person),
                pos=f'"{pos.x:.1f},{-pos.y or 0.0:.1f}!"',
            )
        )

    seen_couples: set[tuple[str, str]] = set()
    for person_id, pos in positions.items():
        spouse_id = pos.person.spouse_id
        if spouse_id in positions:
            couple = tuple(sorted((person_id, spouse_id)))
            if couple not in seen_couples:
                seen_couples.add(couple)
                P.add_edge(pydot.Edge(f'"{couple[0]}"', f'"{couple[1]}"', color="hotpink"))
        for child_id in pos.person.children_ids:
            if child_id in positions:
                P.add_edge(pydot.Edge(f'"{person_id}"', f'"{child_id}"', color="darkgray"))

    return P


def export_dot(positions: dict[str, NodePosition], output_path: Path, config: LayoutConfig | None = None):
    """Write the pinned layout as DOT source."""
    P = build_dot(positions, config)
    P.write(str(output_path), format="raw")
    print(f"DOT layout saved to {output_path}")
