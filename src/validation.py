"""Consistency checks for family tree data before layout."""

import networkx as nx

from graph import build_graph, parent_graph
from layout import LayoutContext, compute_levels
from models import Person
from parsing import parse_date


def validate_people(people: list[Person]) -> list[str]:
    """
    Validate a person list for:
    - Cycles in parent-child relationships
    - Dangling parent, child and spouse references
    - Spouse and parent/child links recorded on one side only
    - Impossible ages (child born before parent, death before birth)
    - People the layout will leave out because no root reaches them

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    by_id = {p.id: p for p in people}
    G = build_graph(people)

    # Check for cycles
    try:
        cycle = nx.find_cycle(parent_graph(G), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # Check references and their symmetry
    for p in people:
        for parent_id in p.parent_ids:
            parent = by_id.get(parent_id)
            if parent is None:
                warnings.append(f"Dangling: {p.full_name} lists missing parent {parent_id}")
            elif p.id not in parent.children_ids:
                warnings.append(
                    f"Asymmetric: {p.full_name} lists parent {parent.full_name}, "
                    f"who does not list them as a child"
                )
        for child_id in p.children_ids:
            child = by_id.get(child_id)
            if child is None:
                warnings.append(f"Dangling: {p.full_name} lists missing child {child_id}")
            elif p.id not in child.parent_ids:
                warnings.append(
                    f"Asymmetric: {p.full_name} lists child {child.full_name}, "
                    f"who does not list them as a parent"
                )
        if p.spouse_id:
            spouse = by_id.get(p.spouse_id)
            if spouse is None:
                warnings.append(f"Dangling: {p.full_name} lists missing spouse {p.spouse_id}")
            elif spouse.spouse_id != p.id:
                warnings.append(
                    f"Asymmetric: {p.full_name} lists spouse {spouse.full_name}, "
                    f"whose spouse is {spouse.spouse_id or 'unset'}"
                )

    # Check for impossible ages along parent edges
    for parent_id, child_id in parent_graph(G).edges():
        parent_birth = parse_date(by_id[parent_id].birth_date)
        child_birth = parse_date(by_id[child_id].birth_date)
        if parent_birth is None or child_birth is None:
            continue

        parent_name = G.nodes[parent_id].get("person_name")
        child_name = G.nodes[child_id].get("person_name")
        if child_birth < parent_birth:
            warnings.append(f"Impossible: {child_name} born before parent {parent_name}")
        elif child_birth.year - parent_birth.year < 12:
            warnings.append(
                f"Suspicious: {parent_name} was less than 12 years "
                f"old when {child_name} was born"
            )

    # Check death before birth
    for p in by_id.values():
        birth = parse_date(p.birth_date)
        death = parse_date(p.death_date)
        if birth and death and death < birth:
            warnings.append(f"Impossible: {p.full_name} died before being born")

    # Check for people no root reaches
    levels = compute_levels(LayoutContext(people))
    unreachable = [p.full_name for p in by_id.values() if p.id not in levels]
    if unreachable:
        warnings.append(f"Unreachable from any root, left out of the layout: {unreachable}")

    return warnings
