"""
After the analysis settles, look over what it concluded and complain
about everything that did not work out. All complaints go to the
Report together, so one run surfaces every type error in the program.
"""
from boozetools.support.foundation import Visitor
from . import syntax
from .ontology import Argument
from .diagnostics import Report
from .type_constraints import ClauseTyping

class TypeChecker(Visitor):
	"""
	Each argument kind gets its own chance to explain what went wrong with it.
	A node with a more specific complaint does not also get the generic
	"no type fits here" one.
	"""
	def __init__(self, report: Report):
		self._report = report
	
	def check_analysis(self, analysis) -> bool:
		self._analysis = analysis
		for typing in analysis.clause_typings():
			for arg in typing.arguments:
				self.visit(arg, typing)
		return self._report.ok()
	
	def _empty(self, arg: Argument, typing: ClauseTyping):
		if typing[arg].empty():
			self._report.no_type(typing.clause, arg)
	
	def visit_Variable(self, arg, typing): self._empty(arg, typing)
	def visit_UnnamedVariable(self, arg, typing): self._empty(arg, typing)
	def visit_StringConstant(self, arg, typing): self._empty(arg, typing)
	def visit_NilConstant(self, arg, typing): self._empty(arg, typing)
	def visit_Counter(self, arg, typing): self._empty(arg, typing)
	def visit_IterationCounter(self, arg, typing): self._empty(arg, typing)
	def visit_RecordInit(self, arg, typing): self._empty(arg, typing)
	def visit_BranchInit(self, arg, typing): self._empty(arg, typing)
	def visit_IntrinsicAggregator(self, arg, typing): self._empty(arg, typing)
	
	def visit_NumericConstant(self, nc: syntax.NumericConstant, typing: ClauseTyping):
		if self._analysis.numeric_constant_type(nc) is None:
			self._report.unresolved_constant(typing.clause, nc)
		else:
			self._empty(nc, typing)
	
	def visit_IntrinsicFunctor(self, fun: syntax.IntrinsicFunctor, typing: ClauseTyping):
		if self._analysis.has_valid_type_info(fun):
			self._empty(fun, typing)
		else:
			self._report.no_functor_overload(typing.clause, fun, [typing[a] for a in fun.arguments])
	
	def _user_call(self, call, typing: ClauseTyping):
		decl = self._analysis.declarations.declaration(call)
		if decl is None:
			self._report.undeclared_functor(typing.clause, call)
		elif not self._analysis.has_valid_declaration(decl):
			self._report.ill_declared_functor(typing.clause, call, decl)
		else:
			self._empty(call, typing)
	
	def visit_UserDefinedFunctor(self, fun, typing): self._user_call(fun, typing)
	def visit_UserDefinedAggregator(self, uda, typing): self._user_call(uda, typing)
	
	def visit_TypeCast(self, cast: syntax.TypeCast, typing: ClauseTyping):
		if self._analysis.name_to_type(cast.type_name) is None:
			self._report.undeclared_cast_type(typing.clause, cast)
		else:
			self._empty(cast, typing)
