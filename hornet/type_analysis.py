"""
Global type analysis: alternate between solving each clause's local
constraints and refining the program-wide overload resolutions,
until the resolutions stop changing.

	analysis = TypeAnalysis(program).run()
	analysis.get_types(some_argument)

Four refinement passes run after every round of local solving, always in
the same order: intrinsic functors, numeric constants, aggregators and
binary constraints. Each reports whether it changed anything. The first
round never counts as settled, because the local solutions it was
refining were computed before any resolution existed.
"""
from typing import Optional, Union, Iterator, Type as PyType
from . import syntax
from .ontology import Argument, each_node
from .operators import (
	TypeAttribute, NumericKind, ALL_KINDS,
	IntrinsicFunctorInfo, FunctorOp, functor_built_in, functor_overloads_of,
	AggregateOp, is_overloaded_aggregator, convert_overloaded_aggregator,
	BinaryConstraintOp, is_overloaded_constraint, convert_overloaded_constraint,
)
from .typesystem import TypeEnvironment, TypeSet, Type, type_attribute
from .environment import build_type_environment, SumTypeBranches, FunctorDeclarations
from .type_constraints import TypeConstraints, ClauseTyping
from .annotation import annotated_clause, TypeAnnotationPrinter
from .diagnostics import Report
from .config import Config

UserCall = Union[syntax.UserDefinedFunctor, syntax.UserDefinedAggregator]
Functor = Union[syntax.IntrinsicFunctor, syntax.UserDefinedFunctor]

class DidNotConverge(Exception):
	def __init__(self, iterations: int):
		super().__init__("Type analysis did not settle after %d iterations" % iterations)
		self.iterations = iterations

class TypeAnalysis:
	"""
	Owns every piece of mutable state the analysis has: the resolution
	maps and the per-clause typings. One of these per program, please.
	"""
	env: TypeEnvironment
	iterations: int
	
	def __init__(self, program: syntax.Program, config: Optional[Config] = None, report: Optional[Report] = None):
		self.program = program
		self.config = config if config is not None else Config()
		self.report = report if report is not None else Report(verbose=self.config.verbose)
		self.env = build_type_environment(program)
		self.branches = SumTypeBranches(self.env, program)
		self.declarations = FunctorDeclarations(program)
		self.iterations = 0
		# The resolution maps:
		self._functor_info: dict[syntax.IntrinsicFunctor, IntrinsicFunctorInfo] = {}
		self._numeric_constant_type: dict[syntax.NumericConstant, NumericKind] = {}
		self._aggregator_type: dict[syntax.IntrinsicAggregator, AggregateOp] = {}
		self._constraint_type: dict[syntax.BinaryConstraint, BinaryConstraintOp] = {}
		# The per-round caches:
		self._typings: list[ClauseTyping] = []
		self._argument_types: dict[Argument, TypeSet] = {}
		self._annotated: list[syntax.Clause] = []
		self._logs: list[str] = []
	
	def run(self) -> "TypeAnalysis":
		debug = self.config.wants_type_analysis_report()
		generator = TypeConstraints(self.env, self.program, self.branches, self.declarations, self)
		limit = self.config.max_iterations
		for iteration in range(1, limit + 1):
			self.iterations = iteration
			self._solve_clauses(generator, debug)
			changed = False
			for refine in self._refine_functors, self._refine_constants, self._refine_aggregators, self._refine_constraints:
				changed |= refine()
			self.report.info("Type analysis round %d: %s" % (iteration, "changed" if changed else "stable"))
			if iteration > 1 and not changed:
				break
		else:
			raise DidNotConverge(limit)
		if self.config.has("show", "type-analysis"):
			print(self.render())
		return self
	
	def _solve_clauses(self, generator: TypeConstraints, debug: bool):
		self._typings.clear()
		self._argument_types.clear()
		self._annotated.clear()
		self._logs.clear()
		trace = self._logs if debug else None
		for clause in self.program.clauses:
			typing = generator.analyse(clause, trace)
			self._typings.append(typing)
			self._argument_types.update(typing.items())
			if debug:
				self._annotated.append(annotated_clause(clause, typing))
	
	def _each(self, kind: PyType) -> Iterator:
		for clause in self.program.clauses:
			for node in each_node(clause):
				if isinstance(node, kind): yield node
	
	# Refinement passes
	
	def _refine_functors(self) -> bool:
		changed = False
		for fun in self._each(syntax.IntrinsicFunctor):
			candidates = self.get_valid_intrinsic_functor_overloads(fun)
			if not candidates:
				changed |= self._functor_info.pop(fun, None) is not None
				continue
			choice = candidates[0]
			if self._functor_info.get(fun) is not choice:
				self._functor_info[fun] = choice
				changed = True
		return changed
	
	def _refine_constants(self) -> bool:
		changed = False
		for nc in self._each(syntax.NumericConstant):
			if nc.fixed_type is not None:
				kind = nc.fixed_type
			else:
				kinds = self.get_type_attributes(nc)
				if TypeAttribute.Signed in kinds: kind = NumericKind.Int
				elif TypeAttribute.Unsigned in kinds: kind = NumericKind.Uint
				elif TypeAttribute.Float in kinds: kind = NumericKind.Float
				else: kind = None
			if kind is None:
				changed |= self._numeric_constant_type.pop(nc, None) is not None
			elif self._numeric_constant_type.get(nc) != kind:
				self._numeric_constant_type[nc] = kind
				changed = True
		return changed
	
	def _refine_aggregators(self) -> bool:
		changed = False
		for agg in self._each(syntax.IntrinsicAggregator):
			if is_overloaded_aggregator(agg.operator):
				assert agg.target is not None, "Overloaded aggregate %s lacks a target" % agg
				kinds = self._kinds_present(agg.target)
				if TypeAttribute.Float in kinds: kind = TypeAttribute.Float
				elif TypeAttribute.Unsigned in kinds: kind = TypeAttribute.Unsigned
				else: kind = TypeAttribute.Signed
				changed |= self._settle(self._aggregator_type, agg, convert_overloaded_aggregator(agg.operator, kind))
			else:
				changed |= self._settle_fixed(self._aggregator_type, agg, agg.operator)
		return changed
	
	def _refine_constraints(self) -> bool:
		changed = False
		for bc in self._each(syntax.BinaryConstraint):
			if is_overloaded_constraint(bc.operator):
				left, right = self._kinds_present(bc.lhs), self._kinds_present(bc.rhs)
				for kind in TypeAttribute.Float, TypeAttribute.Unsigned, TypeAttribute.Symbol:
					if kind in left and kind in right: break
				else:
					kind = TypeAttribute.Signed
				changed |= self._settle(self._constraint_type, bc, convert_overloaded_constraint(bc.operator, kind))
			else:
				changed |= self._settle_fixed(self._constraint_type, bc, bc.operator)
		return changed
	
	def _kinds_present(self, arg: Argument) -> set[TypeAttribute]:
		""" Unconstrained means no kind in particular, so the default kind wins. """
		if self.get_types(arg).is_all(): return set()
		return self.get_type_attributes(arg)
	
	@staticmethod
	def _settle(table: dict, node, op) -> bool:
		if table.get(node) == op: return False
		table[node] = op
		return True
	
	@staticmethod
	def _settle_fixed(table: dict, node, op) -> bool:
		if node in table:
			assert table[node] == op, "Fixed operator %s changed" % node
			return False
		table[node] = op
		return True
	
	# Query surface
	
	def clause_typings(self) -> list[ClauseTyping]:
		return list(self._typings)
	
	def get_types(self, arg: Argument) -> TypeSet:
		assert arg in self._argument_types, "Argument %s was never analysed" % arg
		return self._argument_types[arg]
	
	def get_type_attributes(self, arg: Argument) -> set[TypeAttribute]:
		if isinstance(arg, (syntax.IntrinsicFunctor, syntax.UserDefinedFunctor)) and self.has_valid_type_info(arg):
			return {self.get_functor_return_type_attribute(arg)}
		types = self.get_types(arg)
		if types.is_all(): return set(ALL_KINDS)
		return {type_attribute(t) for t in types}
	
	def get_valid_intrinsic_functor_overloads(self, fun: syntax.IntrinsicFunctor) -> list[IntrinsicFunctorInfo]:
		"""
		Candidates consistent with what is known now, best first.
		Once resolved, a functor only ever reconsiders its chosen operation;
		if that stops fitting, it falls back to unresolved for a round.
		"""
		if fun in self._functor_info: overloads = functor_overloads_of(self._functor_info[fun].op)
		else: overloads = functor_built_in(fun.symbol)
		arg_kinds = [self.get_type_attributes(a) for a in fun.arguments]
		own_kinds = self.get_type_attributes(fun)
		def fits(info: IntrinsicFunctorInfo):
			return (
				info.accepts_arity(len(arg_kinds))
				and all(info.param(i) in kinds for i, kinds in enumerate(arg_kinds))
				and info.result in own_kinds
			)
		return sorted(filter(fits, overloads), key=IntrinsicFunctorInfo.rank)
	
	def functor_info(self, fun: syntax.IntrinsicFunctor) -> IntrinsicFunctorInfo:
		assert self.has_valid_type_info(fun), "Functor %s is not resolved" % fun
		return self._functor_info[fun]
	
	def get_functor_op(self, fun: syntax.IntrinsicFunctor) -> FunctorOp:
		return self.functor_info(fun).op
	
	def is_multi_result_functor(self, fun: syntax.IntrinsicFunctor) -> bool:
		return self.functor_info(fun).multiple_results
	
	def numeric_constant_type(self, nc: syntax.NumericConstant) -> Optional[NumericKind]:
		return self._numeric_constant_type.get(nc)
	
	def get_numeric_constant_type(self, nc: syntax.NumericConstant) -> NumericKind:
		assert nc in self._numeric_constant_type, "Numeric constant %s is not resolved" % nc
		return self._numeric_constant_type[nc]
	
	def get_polymorphic_operator(self, node: Union[syntax.IntrinsicAggregator, syntax.BinaryConstraint]):
		if isinstance(node, syntax.IntrinsicAggregator): table = self._aggregator_type
		else: table = self._constraint_type
		assert node in table, "Operator of %s is not resolved" % node
		return table[node]
	
	def has_valid_type_info(self, arg: Argument) -> bool:
		if isinstance(arg, syntax.IntrinsicFunctor):
			return arg in self._functor_info
		if isinstance(arg, (syntax.UserDefinedFunctor, syntax.UserDefinedAggregator)):
			decl = self.declarations.declaration(arg)
			return decl is not None and self.has_valid_declaration(decl)
		if isinstance(arg, syntax.NumericConstant):
			return arg in self._numeric_constant_type
		if isinstance(arg, syntax.IntrinsicAggregator):
			return arg in self._aggregator_type
		return True
	
	def has_valid_declaration(self, decl: syntax.FunctorDeclaration) -> bool:
		names = [p.type_name for p in decl.params] + [decl.return_type.type_name]
		return all(self.env.is_type(n) for n in names)
	
	def _declaration(self, call: UserCall) -> syntax.FunctorDeclaration:
		assert self.has_valid_type_info(call), "No usable declaration for %s" % call
		return self.declarations.declaration(call)
	
	def get_functor_return_type(self, call: UserCall) -> Type:
		return self.env.get_type(self._declaration(call).return_type.type_name)
	
	def get_functor_param_type(self, call: UserCall, index: int) -> Type:
		return self.env.get_type(self._declaration(call).params[index].type_name)
	
	def get_functor_param_types(self, call: UserCall) -> list[Type]:
		return [self.env.get_type(p.type_name) for p in self._declaration(call).params]
	
	def get_functor_return_type_attribute(self, fun: Functor) -> TypeAttribute:
		if isinstance(fun, syntax.IntrinsicFunctor):
			return self.functor_info(fun).result
		return type_attribute(self.get_functor_return_type(fun))
	
	def get_functor_param_type_attribute(self, fun: Functor, index: int) -> TypeAttribute:
		if isinstance(fun, syntax.IntrinsicFunctor):
			return self.functor_info(fun).param(index)
		return type_attribute(self.get_functor_param_type(fun, index))
	
	def get_functor_param_type_attributes(self, fun: Functor) -> list[TypeAttribute]:
		return [self.get_functor_param_type_attribute(fun, i) for i in range(len(fun.arguments))]
	
	def get_aggregator_param_type_attributes(self, uda: syntax.UserDefinedAggregator) -> list[TypeAttribute]:
		""" Kinds of the declared accumulator and target parameters, in that order. """
		return [type_attribute(t) for t in self.get_functor_param_types(uda)]
	
	def is_stateful_functor(self, call: UserCall) -> bool:
		return self.declarations.is_stateful(call)
	
	def is_float(self, arg: Argument) -> bool: return self._only(arg, TypeAttribute.Float)
	def is_unsigned(self, arg: Argument) -> bool: return self._only(arg, TypeAttribute.Unsigned)
	def is_symbol(self, arg: Argument) -> bool: return self._only(arg, TypeAttribute.Symbol)
	
	def _only(self, arg, kind):
		types = self.get_types(arg)
		return not types.is_all() and not types.empty() and all(type_attribute(t) == kind for t in types)
	
	def name_to_type(self, name: str) -> Optional[Type]:
		return self.env.get_type(name) if self.env.is_type(name) else None
	
	# Diagnostics
	
	def annotated_clauses(self) -> list[syntax.Clause]:
		return list(self._annotated)
	
	def render(self) -> str:
		lines = ["-- Analysis logs --"]
		lines.extend(self._logs)
		lines.append("-- Result --")
		lines.extend(map(str, self._annotated))
		lines.append("-- Result (2) --")
		lines.append(TypeAnnotationPrinter(self).render(self.program))
		return "\n".join(lines)
