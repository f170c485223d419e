"""Connector segments between placed cards, as plain data for renderers."""

from layout import LayoutConfig
from models import Connector, NodePosition


def build_connectors(positions: dict[str, NodePosition], config: LayoutConfig | None = None) -> list[Connector]:
    """
    Derive the lines a renderer draws between cards.

    - spouse: between the facing edges of a placed couple, at their shared y
    - parent_drop: from the bottom of the parent (or the couple midpoint) down a
      third of the generation spacing
    - sibling_bar: across the drop level, from the leftmost to the rightmost child
    - child_stub: from the drop level into the top of each child

    Partners that list the same placed children share one set of parent lines.
    """
    config = config or LayoutConfig()
    half_w = config.node_width / 2
    half_h = config.node_height / 2
    connectors: list[Connector] = []
    seen_couples: set[tuple[str, str]] = set()
    seen_families: set[tuple[float, frozenset]] = set()

    for pos in positions.values():
        person = pos.person
        spouse_pos = positions.get(person.spouse_id) if person.spouse_id else None

        if spouse_pos is not None:
            couple = tuple(sorted((person.id, spouse_pos.person.id)))
            if couple not in seen_couples:
                seen_couples.add(couple)
                left, right = sorted((pos, spouse_pos), key=lambda p: p.x)
                connectors.append(
                    Connector(
                        kind="spouse",
                        x1=left.x + half_w,
                        y1=pos.y,
                        x2=right.x - half_w,
                        y2=pos.y,
                        source_id=left.person.id,
                        target_id=right.person.id,
                    )
                )

        children = [positions[cid] for cid in person.children_ids if cid in positions]
        if not children:
            continue

        parent_x = (pos.x + spouse_pos.x) / 2 if spouse_pos is not None else pos.x
        family_key = (parent_x, frozenset(c.person.id for c in children))
        if family_key in seen_families:
            continue
        seen_families.add(family_key)

        parent_y = pos.y + half_h
        drop_y = parent_y + config.generation_spacing / 3
        connectors.append(
            Connector("parent_drop", parent_x, parent_y, parent_x, drop_y, source_id=person.id)
        )

        xs = [c.x for c in children]
        connectors.append(
            Connector("sibling_bar", min(xs), drop_y, max(xs), drop_y, source_id=person.id)
        )
        for child in children:
            connectors.append(
                Connector(
                    "child_stub",
                    child.x,
                    drop_y,
                    child.x,
                    child.y - half_h,
                    source_id=person.id,
                    target_id=child.person.id,
                )
            )

    return connectors
