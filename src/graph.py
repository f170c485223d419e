"""NetworkX graph building and operations."""

import networkx as nx

from models import Person


def build_graph(people: list[Person]) -> nx.DiGraph:
    """
    Build a NetworkX directed graph from a person list.

    PARENT_OF edges point from parent to child and are taken from both the parent's
    children list and the child's parent list. SPOUSE_OF edges follow each spouse
    link as recorded. Ids that do not name a person in the list are skipped.
    """
    G = nx.DiGraph()

    for p in people:
        if p.id in G:
            continue
        G.add_node(
            p.id,
            person_name=p.full_name,
            given_name=p.first_name,
            surname=p.last_name,
            gender=p.gender,
            birth_date=p.birth_date,
            death_date=p.death_date,
        )

    for p in people:
        for parent_id in p.parent_ids:
            if parent_id in G and parent_id != p.id:
                G.add_edge(parent_id, p.id, relationship_type="PARENT_OF")
        for child_id in p.children_ids:
            if child_id in G and child_id != p.id:
                G.add_edge(p.id, child_id, relationship_type="PARENT_OF")
        if p.spouse_id and p.spouse_id in G and p.spouse_id != p.id:
            # A parent edge between the same pair is kept over the spouse edge
            if not G.has_edge(p.id, p.spouse_id):
                G.add_edge(p.id, p.spouse_id, relationship_type="SPOUSE_OF")

    return G


def parent_graph(G: nx.DiGraph) -> nx.DiGraph:
    """Subgraph view holding only PARENT_OF edges."""
    return G.edge_subgraph(
        [(u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"]
    )


def get_ego_subgraph(G: nx.DiGraph, center_id: str, radius: int = 2) -> nx.DiGraph:
    """
    Extract a subgraph containing nodes within a given degree of a center node.

    Args:
        G: The full graph
        center_id: The person ID to center the subgraph on
        radius: Maximum distance from center (default 2)

    Returns:
        A subgraph containing only nodes within `radius` edges of `center_id`
    """
    if center_id not in G:
        raise ValueError(f"Person ID {center_id} not found in graph")

    # Use undirected view so parents, children and spouses all count as neighbours
    ego = nx.ego_graph(G.to_undirected(as_view=True), center_id, radius=radius)
    return G.subgraph(ego.nodes()).copy()


def connected_people(G: nx.DiGraph, person_id: str) -> set[str]:
    """The person together with their parents, children and spouse."""
    if person_id not in G:
        return set()
    return {person_id} | set(G.predecessors(person_id)) | set(G.successors(person_id))


def subset_people(people: list[Person], keep: set[str]) -> list[Person]:
    """Restrict a person list to the given ids, keeping list order.

    Links to people outside the subset are left in place; the layout treats them as
    dangling references.
    """
    return [p for p in people if p.id in keep]


def search_people(people: list[Person], query: str) -> list[Person]:
    """People whose "first last" name contains the query, ignoring case."""
    query = query.strip().lower()
    if not query:
        return []
    return [p for p in people if query in f"{p.first_name} {p.last_name}".lower()]


def family_statistics(people: list[Person]) -> dict[str, int]:
    """
    Head counts for a person list.

    Children and spouses only count when they name a person in the list.
    """
    G = build_graph(people)
    # First record wins on duplicate ids
    unique = list({p.id: p for p in reversed(people)}.values())

    def has_edge(person_id: str, relationship_type: str) -> bool:
        return any(
            G.edges[person_id, other].get("relationship_type") == relationship_type
            for other in G.successors(person_id)
        )

    return {
        "total": len(unique),
        "males": sum(1 for p in unique if p.gender == "male"),
        "females": sum(1 for p in unique if p.gender == "female"),
        "others": sum(1 for p in unique if p.gender not in ("male", "female")),
        "living": sum(1 for p in unique if not p.death_date),
        "deceased": sum(1 for p in unique if p.death_date),
        "with_children": sum(1 for p in unique if has_edge(p.id, "PARENT_OF")),
        "married": sum(1 for p in unique if has_edge(p.id, "SPOUSE_OF")),
    }
