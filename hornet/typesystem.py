"""
The declared-type lattice
=========================

Types here are owned by one TypeEnvironment and referenced, never copied.
They are compared by identity. The inference engine consumes this module
as a read-only oracle: kinds, subtype relations, and canonical types.

A TypeSet is an immutable set of types, or else the distinguished
value "all", which stands for a complete lack of constraint.
"""
from typing import Callable, Iterable, Iterator, Optional, Sequence
from .operators import TypeAttribute, PRIMITIVE_KINDS, NUMERIC_KINDS

class Type:
	name: str
	def __init__(self, environment: "TypeEnvironment", name: str):
		assert name
		self.environment = environment
		self.name = name
	def __str__(self): return self.name
	def __repr__(self): return "<%s %s>" % (type(self).__name__, self.name)

class ConstantType(Type):
	""" The root of one primitive kind, such as the type of all numeric constants. """
	def __init__(self, environment, name, kind: TypeAttribute):
		super().__init__(environment, name)
		self.kind = kind

class SubsetType(Type):
	def __init__(self, environment, name, base: Type):
		super().__init__(environment, name)
		self.base = base

class PrimitiveType(SubsetType):
	""" number, unsigned, float, symbol: each a subset of a constant type. """

class AliasType(Type):
	aliased: Type
	def __init__(self, environment, name):
		super().__init__(environment, name)
		self.aliased = None  # Filled in once the target exists.

class UnionType(Type):
	def __init__(self, environment, name):
		super().__init__(environment, name)
		self.elements: list[Type] = []

class RecordType(Type):
	def __init__(self, environment, name):
		super().__init__(environment, name)
		self.fields: list[Type] = []

class Branch:
	def __init__(self, name: str, types: Sequence[Type]):
		self.name = name
		self.types = list(types)
	def __repr__(self): return "%s{%s}" % (self.name, ", ".join(t.name for t in self.types))

class AlgebraicDataType(Type):
	def __init__(self, environment, name):
		super().__init__(environment, name)
		self.branches: list[Branch] = []
	def branch(self, name: str) -> Optional[Branch]:
		for b in self.branches:
			if b.name == name: return b


class TypeSet:
	""" Immutable. Equality is set-equality. Iteration is in name order. """
	__slots__ = ("_all", "_types")
	
	def __init__(self, types: Iterable[Type] = (), is_all=False):
		self._all = is_all
		self._types = frozenset() if is_all else frozenset(types)
	
	@staticmethod
	def all() -> "TypeSet": return _ALL
	
	@staticmethod
	def of(*types: Type) -> "TypeSet": return TypeSet(types)
	
	def is_all(self) -> bool: return self._all
	def empty(self) -> bool: return not self._all and not self._types
	def __len__(self):
		assert not self._all, "Cannot count all types"
		return len(self._types)
	def __iter__(self) -> Iterator[Type]:
		assert not self._all, "Cannot enumerate all types"
		return iter(sorted(self._types, key=lambda t: t.name))
	def __contains__(self, item: Type): return self._all or item in self._types
	def __eq__(self, other):
		return isinstance(other, TypeSet) and self._all == other._all and self._types == other._types
	def __hash__(self): return hash((self._all, self._types))
	
	def union(self, other: "TypeSet") -> "TypeSet":
		if self._all or other._all: return _ALL
		return TypeSet(self._types | other._types)
	
	def intersection(self, other: "TypeSet") -> "TypeSet":
		if self._all: return other
		if other._all: return self
		return TypeSet(self._types & other._types)
	
	def filter(self, keep: Callable[[Type], bool], when_all: "TypeSet" = None) -> "TypeSet":
		if self._all: return _ALL if when_all is None else when_all
		return TypeSet(t for t in self._types if keep(t))
	
	def __str__(self):
		if self._all: return "{ - all types - }"
		return "{%s}" % ",".join(t.name for t in self)
	__repr__ = __str__

_ALL = TypeSet(is_all=True)


class TypeEnvironment:
	"""
	Knows every type by name, including the built-in ones.
	Lookups of unknown names are contract violations; ask is_type first.
	"""
	_CONSTANT_NAMES = {
		TypeAttribute.Signed: ("__numberConstant", "number"),
		TypeAttribute.Unsigned: ("__unsignedConstant", "unsigned"),
		TypeAttribute.Float: ("__floatConstant", "float"),
		TypeAttribute.Symbol: ("__symbolConstant", "symbol"),
	}
	
	def __init__(self):
		self._types: dict[str, Type] = {}
		self._constant: dict[TypeAttribute, ConstantType] = {}
		for kind in PRIMITIVE_KINDS:
			constant_name, primitive_name = self._CONSTANT_NAMES[kind]
			constant = self._install(ConstantType(self, constant_name, kind))
			self._constant[kind] = constant
			self._install(PrimitiveType(self, primitive_name, constant))
	
	def _install(self, typ: Type):
		assert typ.name not in self._types, "Type %s defined twice" % typ.name
		self._types[typ.name] = typ
		return typ
	
	def create_subset_type(self, name: str, base: Type) -> SubsetType:
		return self._install(SubsetType(self, name, base))
	def create_alias_type(self, name: str) -> AliasType:
		return self._install(AliasType(self, name))
	def create_union_type(self, name: str) -> UnionType:
		return self._install(UnionType(self, name))
	def create_record_type(self, name: str) -> RecordType:
		return self._install(RecordType(self, name))
	def create_algebraic_data_type(self, name: str) -> AlgebraicDataType:
		return self._install(AlgebraicDataType(self, name))
	
	def is_type(self, name: str) -> bool: return name in self._types
	
	def get_type(self, name: str) -> Type:
		assert name in self._types, "Unknown type %r" % name
		return self._types[name]
	
	def constant_type(self, kind: TypeAttribute) -> ConstantType:
		assert kind in self._constant, "No constant type for %s" % kind.name
		return self._constant[kind]
	
	def constant_numeric_types(self) -> TypeSet:
		return TypeSet(self._constant[k] for k in NUMERIC_KINDS)
	
	def record_types(self) -> TypeSet:
		return TypeSet(t for t in self._types.values() if isinstance(skip_aliases(t), RecordType))

###############################################################################
# The lattice queries

def skip_aliases(typ: Type) -> Type:
	seen = set()
	while isinstance(typ, AliasType):
		assert typ not in seen, "Circular alias %s" % typ.name
		seen.add(typ)
		typ = typ.aliased
	return typ

def base_type(typ: Type) -> Type:
	""" Follow subset types to whatever they ultimately carve from. """
	typ = skip_aliases(typ)
	while isinstance(typ, SubsetType):
		typ = skip_aliases(typ.base)
	return typ

def is_subtype_of(a: Type, b: Type) -> bool:
	if a is b: return True
	if isinstance(a, AliasType): return is_subtype_of(a.aliased, b)
	if isinstance(b, AliasType): return is_subtype_of(a, b.aliased)
	if isinstance(a, UnionType):
		return bool(a.elements) and all(is_subtype_of(e, b) for e in a.elements)
	if isinstance(b, UnionType) and any(is_subtype_of(a, e) for e in b.elements):
		return True
	if isinstance(a, SubsetType):
		return is_subtype_of(a.base, b)
	return False

def _elements(typ: Type) -> list[Type]:
	typ = skip_aliases(typ)
	if isinstance(typ, UnionType):
		return [x for e in typ.elements for x in _elements(e)]
	return [typ]

def greatest_common_subtypes(a, b) -> TypeSet:
	""" Accepts a pair of types or a pair of TypeSets. """
	if isinstance(a, TypeSet):
		if a.is_all(): return b
		if b.is_all(): return a
		found = set()
		for x in a:
			for y in b:
				found.update(greatest_common_subtypes(x, y))
		return TypeSet(found)
	if is_subtype_of(a, b): return TypeSet.of(a)
	if is_subtype_of(b, a): return TypeSet.of(b)
	found = set()
	for x in _elements(a):
		for y in _elements(b):
			if x is a and y is b: continue
			found.update(greatest_common_subtypes(x, y))
	return TypeSet(found)

def is_of_kind(typ: Type, kind: TypeAttribute) -> bool:
	if kind == TypeAttribute.Record: return isinstance(base_type(typ), RecordType)
	if kind == TypeAttribute.ADT: return isinstance(base_type(typ), AlgebraicDataType)
	return is_subtype_of(typ, typ.environment.constant_type(kind))

def type_attribute(typ: Type) -> TypeAttribute:
	root = base_type(typ)
	if isinstance(root, RecordType): return TypeAttribute.Record
	if isinstance(root, AlgebraicDataType): return TypeAttribute.ADT
	for kind in PRIMITIVE_KINDS:
		if is_subtype_of(typ, typ.environment.constant_type(kind)):
			return kind
	raise AssertionError("Type %s has no single kind" % typ.name)

def has_kind(types: TypeSet, kind: TypeAttribute) -> bool:
	""" Could something in this set be of the given kind? "All" could be anything. """
	return types.is_all() or any(is_of_kind(t, kind) for t in types)
