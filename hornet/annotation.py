"""
Human-readable renditions of the type analysis, for the debug report.
Nothing downstream consumes these; they exist so a person can see what the analysis concluded.
"""
from boozetools.support.foundation import Visitor
from . import syntax
from .ontology import Node
from .operators import NumericKind, is_infix_functor
from .type_constraints import ClauseTyping

def annotated_clause(clause: syntax.Clause, typing: ClauseTyping) -> syntax.Clause:
	"""
	A copy of the clause in which every variable is renamed to show its types,
	as in X∈{number}. Wildcards become _∈{...} likewise. The original is untouched.
	"""
	twin = clause.clone()
	twin_typing = typing.transplant(twin)
	def annotate(node: Node) -> Node:
		node.apply(annotate)
		if isinstance(node, syntax.Variable):
			return syntax.Variable("%s∈%s" % (node.name, twin_typing[node]))
		if isinstance(node, syntax.UnnamedVariable):
			return syntax.Variable("_∈%s" % twin_typing[node])
		return node
	twin.apply(annotate)
	return twin

_CONSTANT_KIND = {NumericKind.Int: "Int", NumericKind.Uint: "Uint", NumericKind.Float: "Float"}

class TypeAnnotationPrinter(Visitor):
	"""
	Renders the program with each expression suffixed by what the analysis
	decided about it: type sets for variables, resolved kinds for constants,
	return kinds for functors and so on.
	"""
	def __init__(self, analysis):
		self._analysis = analysis
	
	def render(self, program: syntax.Program) -> str:
		return "\n".join(self.visit(c) for c in program.clauses)
	
	def _args(self, args, sep=", ") -> str:
		return sep.join(self.visit(a) for a in args)
	
	def _body(self, literals) -> str:
		return ", ".join(self.visit(lit) for lit in literals)
	
	def visit_Clause(self, clause: syntax.Clause):
		head = self.visit(clause.head)
		if not clause.body: return head + "."
		return "%s :- \n   %s." % (head, ",\n   ".join(self.visit(lit) for lit in clause.body))
	
	def visit_Atom(self, atom: syntax.Atom):
		relation = self._analysis.program.relation(atom.name)
		shown = []
		for i, arg in enumerate(atom.arguments):
			text = self.visit(arg)
			if relation is not None and i < relation.arity() and isinstance(arg, (syntax.RecordInit, syntax.UnnamedVariable, syntax.TypeCast)):
				text += "∈" + relation.attributes[i].type_name
			shown.append(text)
		return "%s(%s)" % (atom.name, ", ".join(shown))
	
	def visit_Negation(self, negation: syntax.Negation):
		return "!" + self.visit(negation.atom)
	
	def visit_BinaryConstraint(self, bc: syntax.BinaryConstraint):
		op = self._analysis.get_polymorphic_operator(bc).value
		lhs, rhs = self.visit(bc.lhs), self.visit(bc.rhs)
		if op.isalpha() or "_" in op: return "%s(%s, %s)" % (op, lhs, rhs)
		return "%s %s %s" % (lhs, op, rhs)
	
	def _types(self, arg) -> str:
		return str(self._analysis.get_types(arg))
	
	def visit_Variable(self, var: syntax.Variable):
		return "%s∈%s" % (var.name, self._types(var))
	
	def visit_UnnamedVariable(self, var): return "_"
	
	def visit_NumericConstant(self, nc: syntax.NumericConstant):
		kind = self._analysis.numeric_constant_type(nc)
		return "%s∈{%s}" % (nc.text, _CONSTANT_KIND.get(kind, "???"))
	
	def visit_StringConstant(self, sc: syntax.StringConstant):
		return '"%s"∈{string}' % sc.text
	
	def visit_NilConstant(self, nil): return "nil∈{any_record}"
	def visit_Counter(self, counter): return "$∈{number}"
	def visit_IterationCounter(self, counter): return "@iteration()∈{unsigned}"
	
	def visit_TypeCast(self, cast: syntax.TypeCast):
		return "as(%s, %s)∈%s" % (self.visit(cast.value), cast.type_name, self._types(cast))
	
	def visit_RecordInit(self, record: syntax.RecordInit):
		return "[%s]∈%s" % (self._args(record.arguments), self._types(record))
	
	def visit_BranchInit(self, adt: syntax.BranchInit):
		return "$%s(%s)∈%s" % (adt.branch, self._args(adt.arguments), self._types(adt))
	
	def visit_IntrinsicFunctor(self, fun: syntax.IntrinsicFunctor):
		if is_infix_functor(fun.symbol, fun.arity()):
			text = "(%s)" % self._args(fun.arguments, " %s " % fun.symbol)
		else:
			text = "%s(%s)" % (fun.symbol, self._args(fun.arguments))
		if not self._analysis.has_valid_type_info(fun):
			return text + "∈{???}"
		return "%s∈{%s}" % (text, self._analysis.get_functor_return_type_attribute(fun).name)
	
	def visit_UserDefinedFunctor(self, fun: syntax.UserDefinedFunctor):
		text = "@%s(%s)" % (fun.name, self._args(fun.arguments))
		if not self._analysis.has_valid_type_info(fun): return text
		return "%s∈{%s}" % (text, self._analysis.get_functor_return_type(fun))
	
	def visit_IntrinsicAggregator(self, agg: syntax.IntrinsicAggregator):
		op = self._analysis.get_polymorphic_operator(agg).value
		target = "" if agg.target is None else " " + self.visit(agg.target)
		return "%s%s : { %s }∈%s" % (op, target, self._body(agg.body), self._types(agg))
	
	def visit_UserDefinedAggregator(self, uda: syntax.UserDefinedAggregator):
		text = "@@%s %s, %s : { %s }" % (uda.name, self.visit(uda.init), self.visit(uda.target), self._body(uda.body))
		if not self._analysis.has_valid_type_info(uda): return text
		return "%s∈{%s}" % (text, self._analysis.get_functor_return_type(uda))
