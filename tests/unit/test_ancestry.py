"""Tests for ancestor resolution (segment -> owning cell)."""

import pytest

from synaptogen.core.agents import Agent, Cell, NodeKind, TreeSegment
from synaptogen.core.ancestry import AncestorResolver, find_owner_cell


class TestFindOwnerCell:
    """Test the uncached ownership walk."""

    def test_chain_of_depth_five_resolves_to_cell(self, add_cell, build_chain):
        """Test a depth-5 chain rooted at a cell resolves to that cell."""
        soma = add_cell()
        chain = build_chain(soma, depth=5)

        assert find_owner_cell(chain[-1]) is soma
        for segment in chain:
            assert find_owner_cell(segment) is soma

    def test_rootless_chain_is_not_found(self, build_chain):
        """Test a chain ending at a detached root resolves to None."""
        chain = build_chain(None, depth=5)
        assert find_owner_cell(chain[-1]) is None

    def test_none_segment(self):
        assert find_owner_cell(None) is None

    def test_chain_ending_at_other_agent(self):
        """Test a chain whose root is neither a cell nor a segment."""
        other = Agent(position=(0, 0, 0))
        assert other.kind is NodeKind.OTHER
        segment = TreeSegment(position=(1, 0, 0), mother=other)
        assert find_owner_cell(segment) is None

    def test_cyclic_chain_terminates(self):
        """Test a malformed cyclic chain returns None instead of looping."""
        a = TreeSegment(position=(0, 0, 0))
        b = TreeSegment(position=(1, 0, 0), mother=a)
        a.mother = b  # Bypass attach_to to build a malformed cycle
        assert find_owner_cell(b, max_depth=50) is None


class TestOwnerCache:
    """Test the owner cached on segments at attachment time."""

    def test_cache_set_on_attach(self):
        soma = Cell(position=(0, 0, 0), uid=3)
        seg1 = TreeSegment(position=(1, 0, 0), mother=soma)
        seg2 = TreeSegment(position=(2, 0, 0), mother=seg1)

        assert seg1.owner_cell is soma
        assert seg2.owner_cell_uid == 3
        assert seg1 in soma.neurites
        assert seg2 in seg1.daughters

    def test_reattach_propagates_to_subtree(self):
        """Test moving a subtree to another cell refreshes every descendant."""
        soma_a = Cell(position=(0, 0, 0), uid=1)
        soma_b = Cell(position=(10, 0, 0), uid=2)
        seg1 = TreeSegment(position=(1, 0, 0), mother=soma_a)
        seg2 = TreeSegment(position=(2, 0, 0), mother=seg1)
        seg3 = TreeSegment(position=(3, 0, 0), mother=seg2)

        seg1.attach_to(soma_b)

        assert seg1 not in soma_a.neurites
        assert seg1 in soma_b.neurites
        assert seg3.owner_cell is soma_b

    def test_detach_clears_subtree(self):
        soma = Cell(position=(0, 0, 0), uid=1)
        seg1 = TreeSegment(position=(1, 0, 0), mother=soma)
        seg2 = TreeSegment(position=(2, 0, 0), mother=seg1)

        seg1.detach()

        assert seg1.mother is None
        assert seg2.owner_cell is None
        assert find_owner_cell(seg2) is None


class TestAncestorResolver:
    """Test resolver behaviour with and without the resource manager."""

    def test_resolves_registered_owner(self, ctx, add_cell, build_chain):
        soma = add_cell()
        chain = build_chain(soma, depth=5)
        assert ctx.resolver.resolve(chain[-1]) is soma

    def test_detached_chain_not_found(self, ctx, build_chain):
        chain = build_chain(None, depth=5)
        assert ctx.resolver.resolve(chain[-1]) is None

    def test_removed_owner_not_found(self, ctx, add_cell, build_chain):
        """Test a segment whose cell was removed no longer resolves."""
        soma = add_cell()
        chain = build_chain(soma, depth=3)
        ctx.remove_agent(soma)
        assert ctx.resolver.resolve(chain[-1]) is None

    @pytest.mark.parametrize("use_cache", [True, False])
    def test_cache_and_walk_agree(self, ctx, add_cell, build_chain, use_cache):
        soma = add_cell()
        chain = build_chain(soma, depth=4)
        resolver = AncestorResolver(ctx.resource_manager, use_cache=use_cache)
        assert resolver.resolve(chain[2]) is soma

    def test_stale_cache_falls_back_to_walk(self, ctx, add_cell, build_chain):
        """Test a cache pointing at an unregistered cell triggers a fresh walk."""
        soma = add_cell()
        chain = build_chain(soma, depth=2)
        stale = Cell(position=(0, 0, 0), uid=999)
        chain[-1]._owner_cell = stale

        assert ctx.resolver.resolve(chain[-1]) is soma
        assert chain[-1].owner_cell is soma

    def test_non_segment_input(self, ctx, add_cell):
        soma = add_cell()
        assert ctx.resolver.resolve(soma) is None
        assert ctx.resolver.resolve(None) is None
