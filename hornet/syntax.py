"""
The set of syntax-tree nodes for a Datalog program.
A parser (not part of this package) would call these constructors bottom-up.
Class-level type annotations make peace with the IDE wherever later passes look for fields.
"""
from typing import Optional, Sequence
from .ontology import Node, Argument, Literal, Declaration
from .operators import NumericKind, AggregateOp, BinaryConstraintOp, is_infix_functor

def _join(items, sep=","):
	return sep.join(map(str, items))

###############################################################################
# Arguments

class Variable(Argument):
	_plain = ("name",)
	def __init__(self, name: str):
		assert name
		self.name = name
	def __str__(self): return self.name

class UnnamedVariable(Argument):
	def __str__(self): return "_"

class Constant(Argument):
	""" Constants of every sort carry their text as written. """
	_plain = ("text",)
	text: str

class NumericConstant(Constant):
	_plain = ("text", "fixed_type")
	def __init__(self, text: str, fixed_type: Optional[NumericKind] = None):
		assert text
		self.text = text
		self.fixed_type = fixed_type
	def __str__(self): return self.text

class StringConstant(Constant):
	def __init__(self, text: str): self.text = text
	def __str__(self): return '"%s"' % self.text

class NilConstant(Constant):
	text = "nil"
	_plain = ()
	def __str__(self): return "nil"

class Term(Argument):
	""" Something with an argument list. """
	_children = ("arguments",)
	arguments: list[Argument]

class IntrinsicFunctor(Term):
	_plain = ("symbol",)
	def __init__(self, symbol: str, arguments: Sequence[Argument]):
		self.symbol = symbol
		self.arguments = list(arguments)
	def arity(self): return len(self.arguments)
	def __str__(self):
		if is_infix_functor(self.symbol, len(self.arguments)):
			return "(%s%s%s)" % (self.arguments[0], _infix(self.symbol), self.arguments[1])
		return "%s(%s)" % (self.symbol, _join(self.arguments))

def _infix(symbol):
	return " %s " % symbol if symbol.isalpha() else symbol

class UserDefinedFunctor(Term):
	_plain = ("name",)
	def __init__(self, name: str, arguments: Sequence[Argument]):
		self.name = name
		self.arguments = list(arguments)
	def arity(self): return len(self.arguments)
	def __str__(self): return "@%s(%s)" % (self.name, _join(self.arguments))

class RecordInit(Term):
	def __init__(self, arguments: Sequence[Argument]):
		self.arguments = list(arguments)
	def __str__(self): return "[%s]" % _join(self.arguments)

class BranchInit(Term):
	""" Construct one branch of an algebraic data type: $Branch(args) """
	_plain = ("branch",)
	def __init__(self, branch: str, arguments: Sequence[Argument]):
		self.branch = branch
		self.arguments = list(arguments)
	def __str__(self): return "$%s(%s)" % (self.branch, _join(self.arguments, ", "))

class TypeCast(Argument):
	_children = ("value",)
	_plain = ("type_name",)
	def __init__(self, value: Argument, type_name: str):
		self.value = value
		self.type_name = type_name
	def __str__(self): return "as(%s, %s)" % (self.value, self.type_name)

class Counter(Argument):
	def __str__(self): return "$"

class IterationCounter(Argument):
	def __str__(self): return "@iteration()"

class Aggregator(Argument):
	target: Optional[Argument]
	body: list[Literal]
	def base_operator_name(self) -> str: raise NotImplementedError(type(self))
	def _render(self, head):
		target = "" if self.target is None else " %s" % self.target
		return "%s%s : { %s }" % (head, target, _join(self.body, ", "))

class IntrinsicAggregator(Aggregator):
	_children = ("target", "body")
	_plain = ("operator",)
	def __init__(self, operator: AggregateOp, target: Optional[Argument], body: Sequence[Literal]):
		self.operator = operator
		self.target = target
		self.body = list(body)
	def base_operator_name(self): return self.operator.value
	def __str__(self): return self._render(self.operator.value)

class UserDefinedAggregator(Aggregator):
	_children = ("init", "target", "body")
	_plain = ("name",)
	def __init__(self, name: str, init: Argument, target: Argument, body: Sequence[Literal]):
		self.name = name
		self.init = init
		self.target = target
		self.body = list(body)
	def base_operator_name(self): return "@@" + self.name
	def __str__(self): return self._render("@@%s %s," % (self.name, self.init))

# The closed set of argument variants. Every pass that dispatches
# over arguments must have a case for each of these.
ARGUMENT_KINDS = (
	Variable, UnnamedVariable, NumericConstant, StringConstant, NilConstant,
	IntrinsicFunctor, UserDefinedFunctor, IntrinsicAggregator, UserDefinedAggregator,
	RecordInit, BranchInit, TypeCast, Counter, IterationCounter,
)

###############################################################################
# Literals and clauses

class Atom(Literal):
	_children = ("arguments",)
	_plain = ("name",)
	def __init__(self, name: str, arguments: Sequence[Argument]):
		self.name = name
		self.arguments = list(arguments)
	def arity(self): return len(self.arguments)
	def __str__(self): return "%s(%s)" % (self.name, _join(self.arguments))

class Negation(Literal):
	_children = ("atom",)
	def __init__(self, atom: Atom):
		assert isinstance(atom, Atom)
		self.atom = atom
	def __str__(self): return "!%s" % self.atom

class BinaryConstraint(Literal):
	_children = ("lhs", "rhs")
	_plain = ("operator",)
	def __init__(self, operator: BinaryConstraintOp, lhs: Argument, rhs: Argument):
		self.operator = operator
		self.lhs = lhs
		self.rhs = rhs
	def __str__(self):
		if self.operator.value.isalpha() or "_" in self.operator.value:
			return "%s(%s, %s)" % (self.operator.value, self.lhs, self.rhs)
		return "%s %s %s" % (self.lhs, self.operator.value, self.rhs)

class Clause(Node):
	_children = ("head", "body")
	def __init__(self, head: Atom, body: Sequence[Literal] = ()):
		assert isinstance(head, Atom)
		self.head = head
		self.body = list(body)
	def __str__(self):
		if self.body: return "%s :- %s." % (self.head, _join(self.body, ", "))
		return "%s." % self.head

###############################################################################
# Declarations

class Attribute(Node):
	_plain = ("name", "type_name")
	def __init__(self, name: str, type_name: str):
		self.name = name
		self.type_name = type_name
	def __str__(self): return "%s:%s" % (self.name, self.type_name)

class Relation(Declaration):
	_children = ("attributes",)
	_plain = ("name",)
	def __init__(self, name: str, attributes: Sequence[Attribute]):
		self.name = name
		self.attributes = list(attributes)
	def arity(self): return len(self.attributes)
	def __str__(self): return ".decl %s(%s)" % (self.name, _join(self.attributes, ", "))

class FunctorDeclaration(Declaration):
	""" Declares a user-defined functor or aggregate. """
	_children = ("params", "return_type")
	_plain = ("name", "stateful")
	def __init__(self, name: str, params: Sequence[Attribute], return_type: Attribute, stateful=False):
		assert name, "functor name is empty"
		assert return_type is not None
		self.name = name
		self.params = list(params)
		self.return_type = return_type
		self.stateful = stateful
	def arity(self): return len(self.params)
	def __str__(self):
		params = ",".join("%s: %s" % (p.name, p.type_name) for p in self.params)
		text = ".functor %s(%s): %s" % (self.name, params, self.return_type.type_name)
		return text + " stateful" if self.stateful else text

class TypeDeclaration(Declaration):
	pass

class SubsetType(TypeDeclaration):
	_plain = ("name", "base_type")
	def __init__(self, name: str, base_type: str):
		self.name = name
		self.base_type = base_type
	def __str__(self): return ".type %s <: %s" % (self.name, self.base_type)

class AliasType(TypeDeclaration):
	_plain = ("name", "aliased_type")
	def __init__(self, name: str, aliased_type: str):
		self.name = name
		self.aliased_type = aliased_type
	def __str__(self): return ".type %s = %s" % (self.name, self.aliased_type)

class UnionType(TypeDeclaration):
	_plain = ("name", "types")
	def __init__(self, name: str, types: Sequence[str]):
		self.name = name
		self.types = tuple(types)
	def __str__(self): return ".type %s = %s" % (self.name, " | ".join(self.types))

class RecordType(TypeDeclaration):
	_children = ("fields",)
	_plain = ("name",)
	def __init__(self, name: str, fields: Sequence[Attribute]):
		self.name = name
		self.fields = list(fields)
	def __str__(self): return ".type %s = [%s]" % (self.name, _join(self.fields, ", "))

class BranchType(Node):
	_children = ("fields",)
	_plain = ("name",)
	def __init__(self, name: str, fields: Sequence[Attribute] = ()):
		self.name = name
		self.fields = list(fields)
	def __str__(self): return "%s {%s}" % (self.name, _join(self.fields, ", "))

class AlgebraicDataType(TypeDeclaration):
	_children = ("branches",)
	_plain = ("name",)
	def __init__(self, name: str, branches: Sequence[BranchType]):
		assert branches
		self.name = name
		self.branches = list(branches)
	def __str__(self): return ".type %s = %s" % (self.name, " | ".join(map(str, self.branches)))

class Program:
	""" One translation unit, as handed over by the front end. """
	types: list[TypeDeclaration]
	relations: list[Relation]
	functors: list[FunctorDeclaration]
	clauses: list[Clause]
	
	def __init__(self, types=(), relations=(), functors=(), clauses=()):
		self.types = list(types)
		self.relations = list(relations)
		self.functors = list(functors)
		self.clauses = list(clauses)
		self._relation_index = {r.name: r for r in self.relations}
	
	def relation(self, name: str) -> Optional[Relation]:
		return self._relation_index.get(name)
	
	def add_relation(self, relation: Relation):
		self.relations.append(relation)
		self._relation_index[relation.name] = relation
	
	def __str__(self):
		return "\n".join(map(str, [*self.types, *self.functors, *self.relations, *self.clauses]))
