"""
living_trees/tree.py - Ownership-tracked tree nodes

Every node owns its children exclusively and keeps a weak back-reference to
its parent. All structural edits funnel through ``_attach`` so the parent
link and the parent's child list can never disagree.
"""
import weakref
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple


class TreeStructureError(ValueError):
    """Raised when an edit or a check would break single ownership of nodes"""
    pass


class LivingTreeGene:
    """One gene of a tree genome: a payload value plus its position in the tree"""

    def __init__(self, value: Any, children: Iterable['LivingTreeGene'] = (),
                 parent: Optional['LivingTreeGene'] = None):
        """Create a node, attaching children in order.

        ``parent`` is held weakly, like every parent link: the caller must keep
        a strong reference to it (or to its root), otherwise the new node is
        left parentless as soon as the parent is collected.
        """
        self.value = value
        self._children: List['LivingTreeGene'] = []
        self._parent_ref = None

        for child in children:
            self.add_child(child)
        if parent is not None:
            self.parent = parent

    # Structure

    @property
    def children(self) -> Tuple['LivingTreeGene', ...]:
        """Children in order; edit them through the parent link or the child helpers"""
        return tuple(self._children)

    @property
    def parent(self) -> Optional['LivingTreeGene']:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, new_parent: Optional['LivingTreeGene']) -> None:
        self._attach(new_parent)

    def _attach(self, new_parent: Optional['LivingTreeGene'], index: Optional[int] = None) -> None:
        """Detach from the current parent and append (or insert) under new_parent"""
        if new_parent is not None:
            if not isinstance(new_parent, LivingTreeGene):
                raise TypeError(f"Parent must be a LivingTreeGene, got {type(new_parent).__name__}")
            if new_parent is self or any(node is self for node in new_parent.ancestors()):
                raise TreeStructureError("Cannot attach a node beneath itself")

        old_parent = self.parent
        if old_parent is not None:
            del old_parent._children[old_parent._child_index(self)]

        if new_parent is None:
            self._parent_ref = None
            return

        if index is None:
            new_parent._children.append(self)
        else:
            new_parent._children.insert(index, self)
        self._parent_ref = weakref.ref(new_parent)

    def _child_index(self, child: 'LivingTreeGene') -> int:
        # Identity lookup; payload equality must not confuse sibling nodes.
        for i, candidate in enumerate(self._children):
            if candidate is child:
                return i
        raise TreeStructureError("Node is not a child of this parent")

    def add_child(self, child: 'LivingTreeGene') -> None:
        child._attach(self)

    def insert_child(self, index: int, child: 'LivingTreeGene') -> None:
        child._attach(self, index)

    def remove_child(self, child: 'LivingTreeGene') -> None:
        """Detach child, leaving it as the root of its own tree"""
        if child.parent is not self:
            raise TreeStructureError("Node is not a child of this parent")
        child._attach(None)

    def index_in_parent(self) -> Optional[int]:
        parent = self.parent
        if parent is None:
            return None
        return parent._child_index(self)

    def ancestors(self) -> Iterator['LivingTreeGene']:
        """Yield ancestors from the parent up to the root"""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    @property
    def root(self) -> 'LivingTreeGene':
        node = self
        for node in self.ancestors():
            pass
        return node

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self._children

    # Traversal (explicit stacks: tree height must not hit the recursion limit)

    def walk_bottom_up(self) -> Iterator['LivingTreeGene']:
        """Post-order walk: every child strictly before its parent"""
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                yield node
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.children))

    def walk_top_down(self) -> Iterator['LivingTreeGene']:
        """Pre-order walk"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def bottom_up_enumerate(self, visit: Callable[['LivingTreeGene'], Any]) -> None:
        """Call visit once per node of this subtree, children first"""
        for node in self.walk_bottom_up():
            visit(node)

    @property
    def all_nodes(self) -> List['LivingTreeGene']:
        """Every node in this subtree exactly once, this node included"""
        return list(self.walk_top_down())

    def size(self) -> int:
        return sum(1 for _ in self.walk_top_down())

    def depth(self) -> int:
        """Height of this subtree; a leaf has depth 1"""
        deepest = 0
        stack = [(self, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node._children)
        return deepest

    # Genetics

    def mutate(self, rate: float, environment) -> None:
        """Mutate this node's payload only; callers handle recursion"""
        self.value.mutate(rate, environment)

    def copy(self) -> 'LivingTreeGene':
        """Deep copy of this subtree; the copy is always a root"""
        clone_root = LivingTreeGene(self.value.copy())
        stack = [(self, clone_root)]
        while stack:
            source, clone = stack.pop()
            for child in source._children:
                child_clone = LivingTreeGene(child.value.copy())
                # Fresh nodes cannot form a cycle, so link directly.
                clone._children.append(child_clone)
                child_clone._parent_ref = weakref.ref(clone)
                stack.append((child, child_clone))
        return clone_root

    def validate(self) -> None:
        """Check parent links and single ownership for this subtree"""
        seen = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                raise TreeStructureError(f"Node {node!r} is reachable more than once")
            seen.add(id(node))
            for child in node._children:
                if child.parent is not node:
                    raise TreeStructureError(f"Node {child!r} does not point back at its parent")
                stack.append(child)

    def __repr__(self) -> str:
        return f"LivingTreeGene({self.value!r}, children={len(self._children)})"
