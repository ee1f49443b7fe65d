"""
These most-fundamental classes of the syntax tree are separate from
the concrete node variants to avoid various circular-import scenarios.

Every node declares which of its fields hold sub-trees (``_children``)
and which hold plain data (``_plain``). From that, the base class
supplies the generic tree capabilities the analysis passes depend on:
child enumeration, structural equality, deep cloning, and in-place
rewriting of children through a caller-supplied mapping function.

Python's own ``==`` and ``hash`` remain identity-based, because the
analyses key their tables by the particular node. Use ``equals`` to
compare structure.
"""
from pathlib import Path
from typing import Callable, Iterator, NamedTuple, Optional

class SourceSpan(NamedTuple):
	path: Path
	start: int
	stop: int

class Node:
	_children: tuple[str, ...] = ()
	_plain: tuple[str, ...] = ()
	span: Optional[SourceSpan] = None  # None for synthetic nodes.
	
	def children(self) -> list["Node"]:
		found = []
		for field in self._children:
			value = getattr(self, field)
			if value is None: continue
			elif isinstance(value, list): found.extend(value)
			else: found.append(value)
		return found
	
	def equals(self, other: "Node") -> bool:
		if self is other: return True
		if type(self) is not type(other): return False
		if any(getattr(self, f) != getattr(other, f) for f in self._plain): return False
		mine, theirs = self.children(), other.children()
		return len(mine) == len(theirs) and all(a.equals(b) for a, b in zip(mine, theirs))
	
	def clone(self) -> "Node":
		twin = object.__new__(type(self))
		twin.__dict__.update(self.__dict__)
		for field in self._children:
			value = getattr(self, field)
			if value is None: continue
			elif isinstance(value, list): setattr(twin, field, [v.clone() for v in value])
			else: setattr(twin, field, value.clone())
		return twin
	
	def apply(self, mapper: Callable[["Node"], "Node"]) -> None:
		""" Replace each direct child with whatever the mapper returns for it. """
		for field in self._children:
			value = getattr(self, field)
			if value is None: continue
			elif isinstance(value, list): setattr(self, field, [mapper(v) for v in value])
			else: setattr(self, field, mapper(value))
	
	def at(self, path, start: int, stop: int) -> "Node":
		""" The front end calls this with character offsets into the source file. """
		self.span = SourceSpan(Path(path), start, stop)
		return self
	
	def __repr__(self): return "<%s %s>" % (type(self).__name__, self)


class Argument(Node):
	""" Anything that can appear in an argument position: an expression. """

class Literal(Node):
	""" Things in the body of a clause. """

class Declaration(Node):
	""" Relations, functors and types: the things a program declares. """
	name: str


def each_node(root: Node) -> Iterator[Node]:
	"""
	The canonical traversal: pre-order, children in declared order.
	A clone enumerates in exactly the same order as its original.
	"""
	yield root
	for child in root.children():
		yield from each_node(child)

def each_argument(root: Node) -> Iterator[Argument]:
	return (n for n in each_node(root) if isinstance(n, Argument))
