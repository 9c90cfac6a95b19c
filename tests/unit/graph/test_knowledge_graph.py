"""Tests for KnowledgeGraph."""

import pytest
from pydantic import ValidationError

from cortex.config.models import GraphConfig
from cortex.graph import Entity, KnowledgeGraph


@pytest.fixture
def graph(clock) -> KnowledgeGraph:
    """Create a fresh graph driven by the manual clock."""
    return KnowledgeGraph(clock=clock)


def path_ids(graph_result) -> list[list[str]]:
    return [[entity.id for entity in path.entities] for path in graph_result.paths]


class TestEntityOperations:
    """Tests for entity upsert and lookup."""

    def test_add_and_get_entity(self, graph: KnowledgeGraph, clock) -> None:
        """Should add and retrieve an entity."""
        entity = graph.add_entity("Service", {"name": "api"}, tags=["backend"])

        assert graph.get_entity(entity.id) is entity
        assert entity.type == "Service"
        assert entity.properties == {"name": "api"}
        assert entity.metadata.created == clock.now
        assert entity.metadata.updated == clock.now
        assert entity.metadata.tags == ["backend"]

    def test_caller_supplied_id(self, graph: KnowledgeGraph) -> None:
        """Should use the given id."""
        entity = graph.add_entity("Service", {}, entity_id="svc-api")
        assert entity.id == "svc-api"

    def test_readd_preserves_created(self, graph: KnowledgeGraph, clock) -> None:
        """Should keep created, refresh updated and replace the rest."""
        original = graph.add_entity("Service", {"name": "api"}, entity_id="e1", tags=["a"])
        created = original.metadata.created
        clock.advance(hours=2)

        replaced = graph.add_entity("Service", {"name": "api-v2"}, entity_id="e1")

        assert replaced.metadata.created == created
        assert replaced.metadata.updated == clock.now
        assert replaced.properties == {"name": "api-v2"}
        assert replaced.metadata.tags is None
        assert graph.get_stats().entity_count == 1

    def test_readd_with_new_type_moves_type_index(self, graph: KnowledgeGraph) -> None:
        """Should index the entity under its new type only."""
        graph.add_entity("Service", {}, entity_id="e1")
        graph.add_entity("Database", {}, entity_id="e1")

        assert graph.get_entities_by_type("Service") == []
        assert [e.id for e in graph.get_entities_by_type("Database")] == ["e1"]
        assert graph.get_stats().type_distribution == {"Database": 1}

    def test_missing_entity(self, graph: KnowledgeGraph) -> None:
        """Should return None / empty rather than raising."""
        assert graph.get_entity("missing") is None
        assert graph.get_entities_by_type("Missing") == []
        assert graph.get_entity_relationships("missing") == []
        assert graph.get_related_entities("missing") == []

    def test_get_entities_by_type_in_insertion_order(self, graph: KnowledgeGraph) -> None:
        """Should list entities of a type in the order they were added."""
        ids = [graph.add_entity("Service", {"name": n}).id for n in ["a", "b", "c"]]
        graph.add_entity("Team", {"name": "platform"})

        assert [e.id for e in graph.get_entities_by_type("Service")] == ids


class TestRelationshipOperations:
    """Tests for relationships and neighbor queries."""

    @pytest.fixture
    def api(self, graph: KnowledgeGraph) -> Entity:
        return graph.add_entity("Service", {"name": "api"})

    @pytest.fixture
    def db(self, graph: KnowledgeGraph) -> Entity:
        return graph.add_entity("Service", {"name": "db"})

    def test_add_relationship(self, graph: KnowledgeGraph, api, db, clock) -> None:
        """Should create a relationship indexed under both endpoints."""
        rel = graph.add_relationship(api.id, db.id, "depends_on", {"port": 5432}, weight=0.8)

        assert rel is not None
        assert rel.source_id == api.id
        assert rel.target_id == db.id
        assert rel.type == "depends_on"
        assert rel.properties == {"port": 5432}
        assert rel.metadata.weight == 0.8
        assert rel.metadata.created == clock.now
        assert graph.get_entity_relationships(api.id) == [rel]
        assert graph.get_entity_relationships(db.id) == [rel]

    def test_missing_endpoint_rejected(self, graph: KnowledgeGraph, api) -> None:
        """Should return None and leave every index unchanged."""
        before = graph.get_stats()

        assert graph.add_relationship("missing", api.id, "t") is None
        assert graph.add_relationship(api.id, "missing", "t") is None

        assert graph.get_stats() == before
        assert graph.get_entity_relationships(api.id) == []
        assert graph.get_entity_relationships("missing") == []

    def test_relationship_is_immutable(self, graph: KnowledgeGraph, api, db) -> None:
        """Should refuse changes to a stored relationship."""
        rel = graph.add_relationship(api.id, db.id, "depends_on")
        with pytest.raises(ValidationError):
            rel.source_id = "other"

    def test_related_entities_both_directions(self, graph: KnowledgeGraph, api, db) -> None:
        """Should resolve the other endpoint from either side."""
        rel = graph.add_relationship(api.id, db.id, "depends_on")

        from_api = graph.get_related_entities(api.id)
        from_db = graph.get_related_entities(db.id)

        assert [(r.entity.id, r.relationship.id) for r in from_api] == [(db.id, rel.id)]
        assert [(r.entity.id, r.relationship.id) for r in from_db] == [(api.id, rel.id)]

    def test_related_entities_type_filter(self, graph: KnowledgeGraph, api, db) -> None:
        """Should keep only relationships of the requested type."""
        team = graph.add_entity("Team", {"name": "platform"})
        graph.add_relationship(api.id, db.id, "depends_on")
        graph.add_relationship(team.id, api.id, "owns")

        owners = graph.get_related_entities(api.id, "owns")

        assert [r.entity.id for r in owners] == [team.id]
        assert len(graph.get_related_entities(api.id)) == 2

    def test_self_loop(self, graph: KnowledgeGraph, api) -> None:
        """Should index a self-loop once and report the entity as its neighbor."""
        rel = graph.add_relationship(api.id, api.id, "calls")

        assert graph.get_entity_relationships(api.id) == [rel]
        assert [r.entity.id for r in graph.get_related_entities(api.id)] == [api.id]


class TestSearchEntities:
    """Tests for search_entities()."""

    @pytest.fixture
    def populated(self, graph: KnowledgeGraph) -> dict[str, Entity]:
        return {
            "api": graph.add_entity("Service", {"name": "api", "port": 8080}, tags=["backend"]),
            "web": graph.add_entity("Service", {"name": "web"}, tags=["frontend", "public"]),
            "alice": graph.add_entity("Person", {"name": "Alice", "active": True}),
            "runbook": graph.add_entity("Document", {"title": "Runbook"}, tags=["ops", "public"]),
        }

    def test_matches_type_name(self, graph: KnowledgeGraph, populated) -> None:
        """Should match on the type name, case-insensitively."""
        results = graph.search_entities("SERVICE")
        assert {e.id for e in results} == {populated["api"].id, populated["web"].id}

    def test_matches_stringified_property(self, graph: KnowledgeGraph, populated) -> None:
        """Should match stringified non-string property values."""
        assert [e.id for e in graph.search_entities("8080")] == [populated["api"].id]
        assert [e.id for e in graph.search_entities("true")] == [populated["alice"].id]

    def test_property_values_use_json_spelling(self, graph: KnowledgeGraph) -> None:
        """Should spell null, integral floats and lists as JSON would."""
        config = graph.add_entity(
            "Config",
            {"ratio": 1.0, "owner": None, "ports": [80, 443], "limits": {"cpu": 2}},
        )

        assert graph.search_entities("null") == [config]
        assert graph.search_entities("80,443") == [config]
        assert graph.search_entities("none") == []
        assert graph.search_entities("1.0") == []
        assert graph.search_entities("cpu") == []

    def test_matches_own_tags(self, graph: KnowledgeGraph, populated) -> None:
        """Should match on the entity's own tags."""
        results = graph.search_entities("front")
        assert [e.id for e in results] == [populated["web"].id]

    def test_type_restricts_candidates(self, graph: KnowledgeGraph, populated) -> None:
        """Should only consider entities of the given type."""
        results = graph.search_entities("public", entity_type="Document")
        assert [e.id for e in results] == [populated["runbook"].id]

    def test_tag_filter_only_applies_to_non_matches(
        self, graph: KnowledgeGraph, populated
    ) -> None:
        """Should return query hits plus non-hits carrying every filter tag."""
        results = graph.search_entities("alice", tags=["public"])

        # alice matches the query and is kept despite lacking "public";
        # web and runbook miss the query but carry every filter tag
        assert {e.id for e in results} == {
            populated["alice"].id,
            populated["web"].id,
            populated["runbook"].id,
        }

    def test_tag_filter_requires_every_tag(self, graph: KnowledgeGraph, populated) -> None:
        """Should require all filter tags for query misses."""
        results = graph.search_entities("zzz", tags=["public", "ops"])
        assert [e.id for e in results] == [populated["runbook"].id]

    def test_no_match(self, graph: KnowledgeGraph, populated) -> None:
        """Should return an empty list when nothing matches."""
        assert graph.search_entities("zzz") == []


class TestFindPaths:
    """Tests for find_paths()."""

    def test_direct_path(self, graph: KnowledgeGraph) -> None:
        """Should find the single hop between two connected services."""
        e1 = graph.add_entity("Service", {"name": "api"})
        e2 = graph.add_entity("Service", {"name": "db"})
        rel = graph.add_relationship(e1.id, e2.id, "depends_on")

        result = graph.find_paths(e1.id, e2.id, 1)

        assert path_ids(result) == [[e1.id, e2.id]]
        assert [r.type for r in result.paths[0].relationships] == ["depends_on"]
        assert [e.id for e in result.entities] == [e1.id, e2.id]
        assert [r.id for r in result.relationships] == [rel.id]

    def test_traverses_against_direction(self, graph: KnowledgeGraph) -> None:
        """Should treat edges as bidirectional."""
        e1 = graph.add_entity("Service", {"name": "api"})
        e2 = graph.add_entity("Service", {"name": "db"})
        graph.add_relationship(e1.id, e2.id, "depends_on")

        assert path_ids(graph.find_paths(e2.id, e1.id)) == [[e2.id, e1.id]]

    @pytest.mark.parametrize("depth", [0, 1, 5])
    def test_trivial_path(self, graph: KnowledgeGraph, depth: int) -> None:
        """Should return the lone source when source equals target."""
        a = graph.add_entity("Service", {"name": "api"})
        b = graph.add_entity("Service", {"name": "db"})
        graph.add_relationship(a.id, b.id, "depends_on")

        result = graph.find_paths(a.id, a.id, depth)

        assert path_ids(result) == [[a.id]]
        assert result.paths[0].relationships == []
        assert result.relationships == []

    def test_depth_zero(self, graph: KnowledgeGraph) -> None:
        """Should find nothing between distinct entities at depth 0."""
        a = graph.add_entity("Service", {})
        b = graph.add_entity("Service", {})
        graph.add_relationship(a.id, b.id, "depends_on")

        result = graph.find_paths(a.id, b.id, 0)

        assert result.paths == []
        assert result.entities == []

    def test_depth_bound(self, graph: KnowledgeGraph) -> None:
        """Should not find paths longer than max_depth."""
        chain = [graph.add_entity("Step", {"name": str(i)}) for i in range(4)]
        for left, right in zip(chain, chain[1:]):
            graph.add_relationship(left.id, right.id, "next")

        assert graph.find_paths(chain[0].id, chain[3].id, 2).paths == []
        assert path_ids(graph.find_paths(chain[0].id, chain[3].id, 3)) == [
            [e.id for e in chain]
        ]

    def test_unknown_source(self, graph: KnowledgeGraph) -> None:
        """Should return empty results for an unknown source."""
        b = graph.add_entity("Service", {})
        result = graph.find_paths("missing", b.id)
        assert result.paths == []
        assert result.entities == []
        assert result.relationships == []

    def test_unreachable_target(self, graph: KnowledgeGraph) -> None:
        """Should return no paths when the target is disconnected."""
        a = graph.add_entity("Service", {})
        b = graph.add_entity("Service", {})
        assert graph.find_paths(a.id, b.id).paths == []

    def test_parallel_routes_all_recorded(self, graph: KnowledgeGraph) -> None:
        """Should record every route reaching the target, shortest first."""
        a, b, c, d = (graph.add_entity("Node", {"name": n}) for n in "abcd")
        graph.add_relationship(a.id, b.id, "link")
        graph.add_relationship(a.id, c.id, "link")
        graph.add_relationship(b.id, d.id, "link")
        graph.add_relationship(c.id, d.id, "link")
        graph.add_relationship(a.id, d.id, "shortcut")

        result = graph.find_paths(a.id, d.id, 3)

        assert path_ids(result) == [
            [a.id, d.id],
            [a.id, b.id, d.id],
            [a.id, c.id, d.id],
        ]
        assert {e.id for e in result.entities} == {a.id, b.id, c.id, d.id}
        assert len(result.relationships) == 5

    def test_visited_nodes_not_expanded_twice(self, graph: KnowledgeGraph) -> None:
        """Should drop later routes through a node already expanded."""
        # a-b, a-c, b-c, c-t: c is reached via a (depth 1) and via b (depth 2);
        # only the first dequeued c is expanded, the second is discarded.
        a, b, c, t = (graph.add_entity("Node", {"name": n}) for n in ["a", "b", "c", "t"])
        graph.add_relationship(a.id, b.id, "link")
        graph.add_relationship(a.id, c.id, "link")
        graph.add_relationship(b.id, c.id, "link")
        graph.add_relationship(c.id, t.id, "link")

        result = graph.find_paths(a.id, t.id, 5)

        assert path_ids(result) == [[a.id, c.id, t.id]]

    def test_default_depth_from_config(self, clock) -> None:
        """Should use the configured default depth."""
        graph = KnowledgeGraph(GraphConfig(default_max_depth=1), clock=clock)
        chain = [graph.add_entity("Step", {}) for _ in range(3)]
        graph.add_relationship(chain[0].id, chain[1].id, "next")
        graph.add_relationship(chain[1].id, chain[2].id, "next")

        assert graph.find_paths(chain[0].id, chain[2].id).paths == []


class TestStatsAndExport:
    """Tests for get_stats(), export_graph() and clear()."""

    def test_stats(self, graph: KnowledgeGraph) -> None:
        """Should count entities, relationships and types."""
        a = graph.add_entity("Service", {})
        b = graph.add_entity("Service", {})
        c = graph.add_entity("Team", {})
        graph.add_relationship(a.id, b.id, "depends_on")
        graph.add_relationship(c.id, a.id, "owns")

        stats = graph.get_stats()

        assert stats.entity_count == 3
        assert stats.relationship_count == 2
        assert stats.type_distribution == {"Service": 2, "Team": 1}

    def test_export_labels(self, graph: KnowledgeGraph) -> None:
        """Should label nodes by name, then title, then id."""
        named = graph.add_entity("Service", {"name": "api", "title": "API"})
        titled = graph.add_entity("Document", {"title": "Runbook"})
        bare = graph.add_entity("Thing", {"size": 3}, entity_id="thing-1")

        labels = {node.id: node.label for node in graph.export_graph().nodes}

        assert labels == {named.id: "api", titled.id: "Runbook", bare.id: "thing-1"}

    def test_export_edges(self, graph: KnowledgeGraph) -> None:
        """Should project relationships to source/target/type/weight."""
        a = graph.add_entity("Service", {})
        b = graph.add_entity("Service", {})
        rel = graph.add_relationship(a.id, b.id, "depends_on", weight=2.5)

        edges = graph.export_graph().edges

        assert len(edges) == 1
        assert edges[0].id == rel.id
        assert (edges[0].source, edges[0].target) == (a.id, b.id)
        assert edges[0].type == "depends_on"
        assert edges[0].weight == 2.5

    def test_clear(self, graph: KnowledgeGraph) -> None:
        """Should empty all four structures."""
        a = graph.add_entity("Service", {})
        b = graph.add_entity("Service", {})
        graph.add_relationship(a.id, b.id, "depends_on")

        graph.clear()

        assert graph.get_stats().entity_count == 0
        assert graph.get_stats().relationship_count == 0
        assert graph.get_stats().type_distribution == {}
        assert graph.get_entity_relationships(a.id) == []
