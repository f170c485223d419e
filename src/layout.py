"""
Generation-aligned layout of a family tree.

The layout runs four phases over a flat person list:

1) Family units: a person and their resolvable spouse share one footprint.
2) Subtree widths: bottom-up, the horizontal room each unit and its descendants need.
3) Levels: breadth-first generation depth from every root at once; decides who is
   reachable.
4) Positions: depth-first from the roots, children are placed left to right inside
   their reserved widths and one generation down, parents are centred over them, and
   the whole diagram is shifted so it is centred on x = 0.

Dangling ids (parents, children or spouses missing from the list) are skipped wherever
they appear; people that breadth-first traversal never reaches are left out.
"""

import logging
from collections import deque
from dataclasses import dataclass, field

from models import NodePosition, Person
from parsing import birth_sort_key

logger = logging.getLogger(__name__)

NODE_WIDTH = 220
NODE_HEIGHT = 100
GENERATION_SPACING = 220
SPOUSE_GAP = 60
SIBLING_GAP = 400


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT
    generation_spacing: float = GENERATION_SPACING
    spouse_gap: float = SPOUSE_GAP
    sibling_gap: float = SIBLING_GAP


@dataclass
class LayoutContext:
    """Lookup tables for one layout call. Never shared between calls."""

    people: list[Person]
    config: LayoutConfig = field(default_factory=LayoutConfig)
    by_id: dict[str, Person] = field(init=False)
    unit_of: dict[str, str] = field(default_factory=dict)
    widths: dict[str, float] = field(default_factory=dict)
    levels: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        self.by_id = {}
        for person in self.people:
            # First record wins on duplicate ids
            self.by_id.setdefault(person.id, person)

    def spouse_of(self, person: Person) -> Person | None:
        if not person.spouse_id or person.spouse_id == person.id:
            return None
        return self.by_id.get(person.spouse_id)

    def children_of(self, person: Person) -> list[Person]:
        """Resolvable children of both members of the person's unit, oldest first."""
        members = [person]
        spouse = self.spouse_of(person)
        if spouse is not None:
            members.append(spouse)
            members.sort(key=lambda p: p.id)

        seen: set[str] = set()
        children: list[Person] = []
        for member in members:
            for child_id in member.children_ids:
                child = self.by_id.get(child_id)
                if child is None or child_id in seen or child_id == member.id:
                    continue
                seen.add(child_id)
                children.append(child)

        # sorted() is stable, so equal dates keep their recorded order
        return sorted(children, key=birth_sort_key)

    def child_units(self, person: Person) -> list[Person]:
        """One representative child per distinct child family unit, oldest first."""
        units: list[Person] = []
        seen_units: set[str] = set()
        for child in self.children_of(person):
            unit_id = family_unit_id(self, child)
            if unit_id not in seen_units:
                seen_units.add(unit_id)
                units.append(child)
        return units


def family_unit_id(context: LayoutContext, person: Person) -> str:
    """Canonical unit id: the smaller of the person's and spouse's ids."""
    if person.id in context.unit_of:
        return context.unit_of[person.id]
    spouse = context.spouse_of(person)
    unit_id = person.id if spouse is None else min(person.id, spouse.id)
    context.unit_of[person.id] = unit_id
    return unit_id


def family_width(context: LayoutContext, person: Person) -> float:
    """Width of the cards of a unit, without descendants."""
    config = context.config
    if context.spouse_of(person) is None:
        return config.node_width
    return config.node_width * 2 + config.spouse_gap


def reserved_width(context: LayoutContext, person: Person) -> float:
    unit_id = family_unit_id(context, person)
    return context.widths.get(unit_id, family_width(context, person))


def find_roots(context: LayoutContext) -> list[Person]:
    """People with no parent present in the list, in list order."""
    roots = []
    for person in context.by_id.values():
        if not any(parent_id in context.by_id for parent_id in person.parent_ids):
            roots.append(person)
    return roots


def compute_subtree_widths(context: LayoutContext) -> dict[str, float]:
    """
    Compute the horizontal room each family unit needs for itself and its descendants.

    A child reachable through a second parent is not recursed into again; its
    memoized width is reused so it is never counted twice.

    Returns:
        Mapping of family unit id to reserved width
    """
    gap = context.config.sibling_gap
    visited: set[str] = set()

    def subtree_width(person: Person) -> float:
        if person.id in visited:
            return 0.0
        visited.add(person.id)
        spouse = context.spouse_of(person)
        if spouse is not None:
            visited.add(spouse.id)

        children_width = 0.0
        for idx, child in enumerate(context.child_units(person)):
            if idx > 0:
                children_width += gap
            child_spouse = context.spouse_of(child)
            if child.id in visited or (child_spouse is not None and child_spouse.id in visited):
                children_width += reserved_width(context, child)
            else:
                children_width += subtree_width(child)

        width = max(family_width(context, person), children_width)
        context.widths[family_unit_id(context, person)] = width
        return width

    for root in find_roots(context):
        subtree_width(root)

    logger.debug("Computed widths for %d family units", len(context.widths))
    return context.widths


def compute_levels(context: LayoutContext) -> dict[str, int]:
    """
    Assign generation depths breadth-first from all roots at once.

    A child keeps the depth of the first parent that reaches it. A spouse takes the
    depth of their partner when the partner is first leveled, unless the spouse was
    already leveled through their own parents.
    """
    levels = context.levels
    queue: deque[Person] = deque()

    def visit(person: Person, level: int):
        levels[person.id] = level
        queue.append(person)
        spouse = context.spouse_of(person)
        if spouse is not None and spouse.id not in levels:
            levels[spouse.id] = level
            queue.append(spouse)

    for root in find_roots(context):
        if root.id not in levels:
            visit(root, 0)

    while queue:
        person = queue.popleft()
        level = levels[person.id]
        for child_id in person.children_ids:
            child = context.by_id.get(child_id)
            if child is not None and child.id not in levels:
                visit(child, level + 1)

    return levels


def assign_positions(context: LayoutContext) -> dict[str, NodePosition]:
    """
    Convert reserved widths into coordinates, roots left to right in birth order,
    with roots married into a parented family last.

    Each unit is centred over the outermost centres of its child units, or pushed
    right when that would put its own cards left of its reserved span. The member
    that entered the recursion takes the left slot and the spouse the right one.

    A unit is placed one generation below the unit that first reaches it, so a
    spouse who is a root of the data set still sits beside their partner. Only
    people present in the level map are placed.
    """
    config = context.config
    positions: dict[str, NodePosition] = {}
    centers: dict[str, float] = {}
    entered: set[str] = set()

    def place(person: Person, level: int, x: float, index: int, center: float):
        positions[person.id] = NodePosition(
            x=x,
            y=level * config.generation_spacing,
            person=person,
            level=level,
            index=index,
        )
        centers[person.id] = center

    def position_subtree(person: Person, level: int, start_x: float) -> float | None:
        if person.id in centers:
            return centers[person.id]
        # Unreachable people and re-entry through a parent cycle are skipped
        if person.id in entered or person.id not in context.levels:
            return None
        entered.add(person.id)

        own_width = family_width(context, person)
        child_centers = []
        cursor = start_x
        for child in context.child_units(person):
            child_center = position_subtree(child, level + 1, cursor)
            if child_center is not None:
                child_centers.append(child_center)
            cursor += reserved_width(context, child) + config.sibling_gap

        if person.id in centers:
            return centers[person.id]

        if child_centers:
            center = (min(child_centers) + max(child_centers)) / 2
            if center - own_width / 2 < start_x:
                center = start_x + own_width / 2
        else:
            center = start_x + own_width / 2

        primary_x = center - own_width / 2 + config.node_width / 2
        place(person, level, primary_x, 0, center)

        spouse = context.spouse_of(person)
        if spouse is not None and spouse.id not in positions:
            place(spouse, level, primary_x + config.node_width + config.spouse_gap, 1, center)

        return center

    def married_in(root: Person) -> bool:
        spouse = context.spouse_of(root)
        return spouse is not None and any(pid in context.by_id for pid in spouse.parent_ids)

    # Roots who married into a family with parents in the list wait until that
    # family is placed, so they are drawn beside their partner instead of above them
    roots = sorted(find_roots(context), key=birth_sort_key)
    roots = [r for r in roots if not married_in(r)] + [r for r in roots if married_in(r)]

    current_x = 0.0
    for root in roots:
        if root.id in positions:
            continue
        position_subtree(root, 0, current_x)
        current_x += reserved_width(context, root) + config.sibling_gap

    return positions


def center_positions(positions: dict[str, NodePosition], config: LayoutConfig) -> dict[str, NodePosition]:
    """Shift every x so the bounding box of all cards is centred on 0."""
    if not positions:
        return positions
    half = config.node_width / 2
    min_x = min(pos.x - half for pos in positions.values())
    max_x = max(pos.x + half for pos in positions.values())
    shift = (min_x + max_x) / 2
    for pos in positions.values():
        pos.x -= shift
    return positions


def calculate_layout(people: list[Person], config: LayoutConfig | None = None) -> dict[str, NodePosition]:
    """
    Lay out a family tree.

    Args:
        people: Person records; read but never modified
        config: Card sizes and spacing (defaults to LayoutConfig())

    Returns:
        Mapping of person id to placed position, for every reachable person
    """
    context = LayoutContext(list(people), config or LayoutConfig())
    compute_subtree_widths(context)
    compute_levels(context)
    positions = assign_positions(context)
    center_positions(positions, context.config)

    dropped = len(context.by_id) - len(positions)
    if dropped:
        logger.debug("%d people unreachable from any root were left out", dropped)
    return positions
