"""
Everything the analyses need to know about a program's declarations,
as opposed to its rules: the declared-type environment, which ADT owns
which branch, and which user-defined functors exist.

Type declarations may refer to each other in any order, and records
or ADTs may be recursive. So types are first created empty under their
names, and only then is the structure of each one filled in.
Declarations naming types that do not exist are left for a separate
semantic check to complain about; they simply do not become types.
"""
from typing import Optional, Union
from boozetools.support.foundation import Visitor
from . import syntax, typesystem
from .typesystem import TypeEnvironment, Type

def build_type_environment(program: syntax.Program) -> TypeEnvironment:
	env = TypeEnvironment()
	builder = _StructureBuilder(env)
	declared = {}
	for td in program.types:
		if not env.is_type(td.name): declared.setdefault(td.name, td)
	for td in declared.values(): builder.visit(td)
	for td in declared.values(): builder.complete(td)
	return env

class _StructureBuilder(Visitor):
	"""
	The first visit creates an empty type of the right sort.
	Completion gives it structure once every name exists.
	Subset and alias types need their target at creation,
	so those wait in line until something asks for them.
	"""
	def __init__(self, env: TypeEnvironment):
		self._env = env
		self._deferred: dict[str, syntax.TypeDeclaration] = {}
	
	def _lookup(self, name) -> Optional[Type]:
		if name in self._deferred:
			self.visit(self._deferred.pop(name), True)
		return self._env.get_type(name) if self._env.is_type(name) else None
	
	def visit_SubsetType(self, td: syntax.SubsetType, now=False):
		if not now: self._deferred[td.name] = td
		else:
			base = self._lookup(td.base_type)
			if base is not None: self._env.create_subset_type(td.name, base)
	
	def visit_AliasType(self, td: syntax.AliasType, now=False):
		if not now: self._deferred[td.name] = td
		else:
			target = self._lookup(td.aliased_type)
			if target is not None: self._env.create_alias_type(td.name).aliased = target
	
	def visit_UnionType(self, td: syntax.UnionType): self._env.create_union_type(td.name)
	def visit_RecordType(self, td: syntax.RecordType): self._env.create_record_type(td.name)
	def visit_AlgebraicDataType(self, td: syntax.AlgebraicDataType): self._env.create_algebraic_data_type(td.name)
	
	def complete(self, td: syntax.TypeDeclaration):
		if isinstance(td, (syntax.SubsetType, syntax.AliasType)):
			self._lookup(td.name)
			return
		typ = self._env.get_type(td.name)
		if isinstance(td, syntax.UnionType):
			typ.elements = [e for e in map(self._lookup, td.types) if e is not None]
		elif isinstance(td, syntax.RecordType):
			typ.fields = self._fields(td.fields)
		elif isinstance(td, syntax.AlgebraicDataType):
			typ.branches = [typesystem.Branch(b.name, self._fields(b.fields)) for b in td.branches]
		else:
			raise AssertionError(type(td))
	
	def _fields(self, fields: list[syntax.Attribute]) -> list[Type]:
		found = [self._lookup(f.type_name) for f in fields]
		if None in found:
			# An undeclared field type leaves a record nobody can construct.
			return []
		return found


class SumTypeBranches:
	""" Which algebraic data type owns each branch name. """
	def __init__(self, env: TypeEnvironment, program: syntax.Program):
		self._branches: dict[str, typesystem.AlgebraicDataType] = {}
		for td in program.types:
			if isinstance(td, syntax.AlgebraicDataType) and env.is_type(td.name):
				adt = env.get_type(td.name)
				for branch in td.branches:
					self._branches.setdefault(branch.name, adt)
	
	def get_type(self, branch: str) -> Optional[typesystem.AlgebraicDataType]:
		return self._branches.get(branch)


UserCall = Union[syntax.UserDefinedFunctor, syntax.UserDefinedAggregator]

class FunctorDeclarations:
	"""
	Declaration storage for user-defined functors and aggregates.
	Lookup answers None for a name nobody declared; callers
	treat that as "no valid type information".
	"""
	def __init__(self, program: syntax.Program):
		self._declarations = {}
		for decl in program.functors:
			self._declarations.setdefault(decl.name, decl)
	
	def declaration(self, call: UserCall) -> Optional[syntax.FunctorDeclaration]:
		return self._declarations.get(call.name)
	
	def is_stateful(self, call: UserCall) -> bool:
		decl = self.declaration(call)
		return decl is not None and decl.stateful
