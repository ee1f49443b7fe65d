"""
The local constraint solver: for one clause at a time, build a
constraint system over the types of its arguments, solve it, and
report the TypeSet each argument ended up with.

All occurrences of a named variable within a clause share one type
variable; every other argument gets a type variable of its own.

Current overload resolutions feed back in through the `resolutions`
object (in practice, the TypeAnalysis driving this whole business):
a functor or constant already resolved is constrained more tightly
than one still up for grabs.
"""
from typing import Optional, Sequence
from boozetools.support.foundation import Visitor
from . import syntax
from .ontology import Argument, each_node, each_argument
from .operators import TypeAttribute, NumericKind, FunctorOp, AggregateOp, SYMBOLIC_CONSTRAINTS, functor_built_in, is_infix_functor
from .constraints import Constraint, Assignment, Problem, TypeVar
from .environment import SumTypeBranches, FunctorDeclarations
from .typesystem import (
	TypeEnvironment, TypeSet, Type, RecordType,
	greatest_common_subtypes, is_subtype_of, skip_aliases, base_type, has_kind, is_of_kind,
	ConstantType,
)

###############################################################################
# The vocabulary of constraints

class SubtypeOfType(Constraint):
	def __init__(self, var: TypeVar, bound: Type):
		self._var, self._bound = var, bound
	def update(self, assignment: Assignment) -> bool:
		return assignment.narrow(self._var, greatest_common_subtypes(assignment[self._var], TypeSet.of(self._bound)))
	def __str__(self): return "%s <: %s" % (self._var, self._bound)

class SubtypeOfVar(Constraint):
	def __init__(self, var: TypeVar, bound: TypeVar):
		self._var, self._bound = var, bound
	def update(self, assignment: Assignment) -> bool:
		return assignment.narrow(self._var, greatest_common_subtypes(assignment[self._var], assignment[self._bound]))
	def __str__(self): return "%s <: %s" % (self._var, self._bound)

class HasSupertypeInSet(Constraint):
	def __init__(self, var: TypeVar, values: TypeSet):
		self._var, self._values = var, values
	def update(self, assignment: Assignment) -> bool:
		current = assignment[self._var]
		if current.is_all():
			narrower = self._values
		else:
			narrower = current.filter(lambda t: any(is_subtype_of(t, v) for v in self._values))
		return assignment.narrow(self._var, narrower)
	def __str__(self): return "∃ t ∈ %s: %s <: t" % (self._values, self._var)

class IsOfKind(Constraint):
	def __init__(self, var: TypeVar, kind: TypeAttribute, candidates: TypeSet):
		self._var, self._kind, self._candidates = var, kind, candidates
	def update(self, assignment: Assignment) -> bool:
		narrower = assignment[self._var].filter(lambda t: is_of_kind(t, self._kind), self._candidates)
		return assignment.narrow(self._var, narrower)
	def __str__(self): return "%s is a %s" % (self._var, self._kind.name)

def _has_common_base(typ: Type) -> bool:
	return isinstance(base_type(typ), ConstantType)

class SubtypesOfSameBaseType(Constraint):
	"""
	Both sides must carve from a common primitive base type,
	without necessarily being the same type.
	"""
	def __init__(self, left: TypeVar, right: TypeVar):
		self._left, self._right = left, right
	def update(self, assignment: Assignment) -> bool:
		left, right = assignment[self._left], assignment[self._right]
		if left.is_all() and right.is_all(): return False
		def bases(types):
			return TypeSet(base_type(t) for t in types if _has_common_base(t))
		if left.is_all(): return assignment.narrow(self._left, bases(right))
		if right.is_all(): return assignment.narrow(self._right, bases(left))
		common = bases(left).intersection(bases(right))
		def keep(t): return any(is_subtype_of(t, b) for b in common)
		changed = assignment.narrow(self._left, left.filter(keep))
		return assignment.narrow(self._right, right.filter(keep)) or changed
	def __str__(self): return "∃ t : (%s <: t) ∧ (%s <: t) ∧ t is a base type" % (self._left, self._right)

class SatisfiesOverload(Constraint):
	"""
	Candidates drop out as their parameter or result kinds become
	impossible. Once only one remains, it pins down its arguments and
	its result. If none remain, the result can have no type at all.
	"""
	def __init__(self, env: TypeEnvironment, symbol: str, result: TypeVar, args: Sequence[TypeVar], subtype_result: bool):
		self._env = env
		self._symbol = symbol
		self._overloads = functor_built_in(symbol)
		self._result, self._args = result, tuple(args)
		self._subtype_result = subtype_result
	
	def update(self, assignment: Assignment) -> bool:
		def possible(kind, var):
			return has_kind(assignment[var], kind)
		def plausible(info):
			return (
				info.accepts_arity(len(self._args))
				and all(possible(info.param(i), a) for i, a in enumerate(self._args))
				and possible(info.result, self._result)
			)
		self._overloads = [info for info in self._overloads if plausible(info)]
		if not self._overloads:
			return assignment.narrow(self._result, TypeSet())
		if len(self._overloads) > 1:
			return False
		info = self._overloads[0]
		changed = False
		if info.op != FunctorOp.ORD:
			for i, arg in enumerate(self._args):
				changed |= assignment.narrow(arg, self._subtypes_of(assignment[arg], info.param(i)))
		current = assignment[self._result]
		if current.is_all() and not self._subtype_result:
			narrower = TypeSet.of(self._env.constant_type(info.result))
		else:
			narrower = self._subtypes_of(current, info.result)
		return assignment.narrow(self._result, narrower) or changed
	
	def _subtypes_of(self, types: TypeSet, kind: TypeAttribute) -> TypeSet:
		bound = self._env.constant_type(kind)
		return types.filter(lambda t: is_subtype_of(t, bound))
	
	def __str__(self):
		args = ",".join(map(str, self._args))
		return "%s = %s(%s) overloads %s" % (self._result, self._symbol, args, [i.op.name for i in self._overloads])

class IsRecordOfArity(Constraint):
	def __init__(self, record: TypeVar, arity: int, candidates: TypeSet):
		self._record, self._arity, self._candidates = record, arity, candidates
	def update(self, assignment: Assignment) -> bool:
		def fits(t):
			root = skip_aliases(t)
			return isinstance(root, RecordType) and len(root.fields) == self._arity
		return assignment.narrow(self._record, assignment[self._record].filter(fits, self._candidates.filter(fits)))
	def __str__(self): return "%s is a record of arity %d" % (self._record, self._arity)

class SubtypeOfComponent(Constraint):
	def __init__(self, element: TypeVar, record: TypeVar, index: int):
		self._element, self._record, self._index = element, record, index
	def update(self, assignment: Assignment) -> bool:
		records = assignment[self._record]
		if records.is_all(): return False
		valid, fields = [], []
		for t in records:
			root = skip_aliases(t)
			if isinstance(root, RecordType) and self._index < len(root.fields):
				valid.append(t)
				fields.append(root.fields[self._index])
		elements = greatest_common_subtypes(assignment[self._element], TypeSet(fields))
		changed = assignment.narrow(self._record, TypeSet(valid))
		return assignment.narrow(self._element, elements) or changed
	def __str__(self): return "%s <: %s::%d" % (self._element, self._record, self._index)

###############################################################################
# The result of solving for one clause

class ClauseTyping:
	"""
	TypeSets for the arguments of one clause, kept by position in
	the canonical traversal. A structurally-identical copy of the clause
	enumerates its arguments in the same order, so the same positions
	apply to it without solving again.
	"""
	def __init__(self, clause: syntax.Clause, type_sets: Sequence[TypeSet]):
		self.clause = clause
		self.arguments = tuple(each_argument(clause))
		assert len(self.arguments) == len(type_sets), "Size mismatch between clause and its types"
		self.type_sets = tuple(type_sets)
		self._index = {arg: i for i, arg in enumerate(self.arguments)}
	
	def __getitem__(self, arg: Argument) -> TypeSet:
		return self.type_sets[self._index[arg]]
	
	def __contains__(self, arg: Argument): return arg in self._index
	def __len__(self): return len(self.arguments)
	
	def items(self):
		return zip(self.arguments, self.type_sets)
	
	def transplant(self, twin: syntax.Clause) -> "ClauseTyping":
		twin_arguments = list(each_argument(twin))
		assert len(twin_arguments) == len(self.arguments), "Size mismatch between clause and its clone"
		for mine, theirs in zip(self.arguments, twin_arguments):
			assert type(mine) is type(theirs), (mine, theirs)
		return ClauseTyping(twin, self.type_sets)

###############################################################################
# Constraint generation

def _as_integer(text: str) -> Optional[int]:
	for base in (0, 10):
		try: return int(text, base)
		except ValueError: pass

def _parses_as(text: str, kind: NumericKind) -> bool:
	if kind is NumericKind.Float:
		try: float(text)
		except ValueError: return False
		return True
	value = _as_integer(text)
	if value is None: return False
	if kind is NumericKind.Int: return -2**31 <= value < 2**31
	return 0 <= value < 2**32


class TypeConstraints(Visitor):
	"""
	Visits every node of a clause in canonical order, adding constraints
	as it goes. There is a case for every kind of argument; a kind of node
	without a case is a bug, and the visitor will say so loudly.
	"""
	def __init__(self, env: TypeEnvironment, program: syntax.Program, branches: SumTypeBranches, declarations: FunctorDeclarations, resolutions):
		self._env = env
		self._program = program
		self._branches = branches
		self._declarations = declarations
		self._resolutions = resolutions
	
	def analyse(self, clause: syntax.Clause, trace: Optional[list[str]] = None) -> ClauseTyping:
		self._problem = Problem()
		self._named: dict[str, TypeVar] = {}
		self._vars: dict[Argument, TypeVar] = {}
		self._negated = set()
		for node in each_node(clause):
			self.visit(node)
		if trace is not None: trace.append("Clause: %s" % clause)
		solution = self._problem.solve(trace)
		arguments = list(each_argument(clause))
		return ClauseTyping(clause, [solution[self._var(a)] for a in arguments])
	
	def _var(self, arg: Argument) -> TypeVar:
		if isinstance(arg, syntax.Variable):
			if arg.name not in self._named:
				self._named[arg.name] = self._problem.variable(arg.name)
			return self._named[arg.name]
		if arg not in self._vars:
			self._vars[arg] = self._problem.variable("<%s>" % arg)
		return self._vars[arg]
	
	def _add(self, constraint: Constraint): self._problem.add(constraint)
	
	def _bound(self, arg: Argument, bound: Type): self._add(SubtypeOfType(self._var(arg), bound))
	
	def _constant(self, kind: TypeAttribute) -> Type: return self._env.constant_type(kind)
	
	def _declared_type(self, name: str) -> Optional[Type]:
		return self._env.get_type(name) if self._env.is_type(name) else None
	
	# Structure
	
	def visit_Clause(self, clause: syntax.Clause): pass
	def visit_Negation(self, negation: syntax.Negation): self._negated.add(negation.atom)
	
	def visit_Atom(self, atom: syntax.Atom):
		relation = self._program.relation(atom.name)
		if relation is None or relation.arity() != atom.arity(): return
		negated = atom in self._negated
		for arg, attribute in zip(atom.arguments, relation.attributes):
			declared = self._declared_type(attribute.type_name)
			if declared is None: continue
			if negated and isinstance(arg, syntax.Variable): continue
			self._bound(arg, declared)
	
	def visit_BinaryConstraint(self, bc: syntax.BinaryConstraint):
		lhs, rhs = self._var(bc.lhs), self._var(bc.rhs)
		if bc.operator in SYMBOLIC_CONSTRAINTS:
			symbol = self._constant(TypeAttribute.Symbol)
			self._add(SubtypeOfType(lhs, symbol))
			self._add(SubtypeOfType(rhs, symbol))
		else:
			self._add(SubtypeOfVar(lhs, rhs))
			self._add(SubtypeOfVar(rhs, lhs))
	
	# Arguments
	
	def visit_Variable(self, var: syntax.Variable): self._var(var)
	def visit_UnnamedVariable(self, var: syntax.UnnamedVariable): self._var(var)
	
	def visit_NumericConstant(self, nc: syntax.NumericConstant):
		if nc.fixed_type is not None:
			kinds = [nc.fixed_type] if _parses_as(nc.text, nc.fixed_type) else []
		else:
			resolved = self._resolutions.numeric_constant_type(nc)
			if resolved is not None: kinds = [resolved]
			else: kinds = [k for k in NumericKind if _parses_as(nc.text, k)]
		possible = TypeSet(self._constant(k.attribute()) for k in kinds)
		self._add(HasSupertypeInSet(self._var(nc), possible))
	
	def visit_StringConstant(self, sc: syntax.StringConstant):
		self._bound(sc, self._constant(TypeAttribute.Symbol))
	
	def visit_NilConstant(self, nil: syntax.NilConstant):
		self._add(IsOfKind(self._var(nil), TypeAttribute.Record, self._env.record_types()))
	
	def visit_Counter(self, counter: syntax.Counter):
		self._bound(counter, self._constant(TypeAttribute.Signed))
	
	def visit_IterationCounter(self, counter: syntax.IterationCounter):
		self._bound(counter, self._constant(TypeAttribute.Unsigned))
	
	def visit_TypeCast(self, cast: syntax.TypeCast):
		declared = self._declared_type(cast.type_name)
		if declared is None: self._add(HasSupertypeInSet(self._var(cast), TypeSet()))
		else: self._bound(cast, declared)
	
	def visit_IntrinsicFunctor(self, fun: syntax.IntrinsicFunctor):
		result = self._var(fun)
		args = [self._var(a) for a in fun.arguments]
		infix = is_infix_functor(fun.symbol, fun.arity())
		resolved = self._resolutions.has_valid_type_info(fun)
		if not resolved:
			self._add(SatisfiesOverload(self._env, fun.symbol, result, args, infix))
		if infix:
			# Arguments need only share a base type with the result.
			for a in args: self._add(SubtypesOfSameBaseType(a, result))
			return
		if not resolved: return
		info = self._resolutions.functor_info(fun)
		self._add(SubtypeOfType(result, self._constant(info.result)))
		if info.op == FunctorOp.ORD: return
		for i, a in enumerate(args):
			self._add(SubtypeOfType(a, self._constant(info.param(i))))
	
	def visit_UserDefinedFunctor(self, fun: syntax.UserDefinedFunctor):
		self._var(fun)
		decl = self._declarations.declaration(fun)
		if decl is None or decl.arity() != fun.arity() or not self._resolutions.has_valid_declaration(decl): return
		self._bound(fun, self._env.get_type(decl.return_type.type_name))
		for arg, param in zip(fun.arguments, decl.params):
			self._bound(arg, self._env.get_type(param.type_name))
	
	def visit_IntrinsicAggregator(self, agg: syntax.IntrinsicAggregator):
		var = self._var(agg)
		if agg.operator is AggregateOp.COUNT:
			self._add(SubtypeOfType(var, self._constant(TypeAttribute.Signed)))
		elif agg.operator is AggregateOp.MEAN:
			self._add(SubtypeOfType(var, self._constant(TypeAttribute.Float)))
		else:
			self._add(HasSupertypeInSet(var, self._env.constant_numeric_types()))
		if agg.target is not None:
			target = self._var(agg.target)
			self._add(SubtypeOfVar(target, var))
			self._add(SubtypeOfVar(var, target))
	
	def visit_UserDefinedAggregator(self, uda: syntax.UserDefinedAggregator):
		self._var(uda)
		decl = self._declarations.declaration(uda)
		if decl is None or decl.arity() != 2 or not self._resolutions.has_valid_declaration(decl): return
		accumulator = self._env.get_type(decl.return_type.type_name)
		self._bound(uda, accumulator)
		self._bound(uda.init, self._env.get_type(decl.params[0].type_name))
		self._bound(uda.target, self._env.get_type(decl.params[1].type_name))
	
	def visit_RecordInit(self, record: syntax.RecordInit):
		var = self._var(record)
		self._add(IsRecordOfArity(var, len(record.arguments), self._env.record_types()))
		for i, arg in enumerate(record.arguments):
			self._add(SubtypeOfComponent(self._var(arg), var, i))
	
	def visit_BranchInit(self, adt: syntax.BranchInit):
		self._var(adt)
		owner = self._branches.get_type(adt.branch)
		if owner is None: return
		self._bound(adt, owner)
		branch = owner.branch(adt.branch)
		if len(branch.types) != len(adt.arguments): return
		for arg, field in zip(adt.arguments, branch.types):
			self._bound(arg, field)
	
	# Declarations show up inside nothing a clause holds,
	# so anything else reaching here is a new kind of node.
