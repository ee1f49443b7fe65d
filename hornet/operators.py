"""
The compiled-in vocabulary of built-in operations:
the coarse kinds used for overload matching, the table of intrinsic
functor overloads, and the overloadable aggregate and comparison
operators with their concrete variants.
"""
from enum import Enum, IntEnum
from typing import NamedTuple

class TypeAttribute(IntEnum):
	""" The kind of a type. Declaration order is the ranking order. """
	Symbol = 0
	Signed = 1
	Unsigned = 2
	Float = 3
	Record = 4
	ADT = 5

PRIMITIVE_KINDS = (TypeAttribute.Symbol, TypeAttribute.Signed, TypeAttribute.Unsigned, TypeAttribute.Float)
NUMERIC_KINDS = (TypeAttribute.Signed, TypeAttribute.Unsigned, TypeAttribute.Float)

# What an unconstrained expression might be.
ALL_KINDS = frozenset([
	TypeAttribute.Signed, TypeAttribute.Unsigned, TypeAttribute.Float,
	TypeAttribute.Symbol, TypeAttribute.Record,
])

class NumericKind(Enum):
	""" The concrete representation chosen for a numeric constant. """
	Int = "Int"
	Uint = "Uint"
	Float = "Float"
	
	def attribute(self) -> TypeAttribute:
		return _NUMERIC_ATTRIBUTE[self]

_NUMERIC_ATTRIBUTE = {
	NumericKind.Int: TypeAttribute.Signed,
	NumericKind.Uint: TypeAttribute.Unsigned,
	NumericKind.Float: TypeAttribute.Float,
}

###############################################################################
# Intrinsic functors

class FunctorOp(Enum):
	ORD = "ord"
	STRLEN = "strlen"
	NEG = "neg"
	FNEG = "fneg"
	BNOT = "bnot"
	UBNOT = "ubnot"
	LNOT = "lnot"
	ULNOT = "ulnot"
	F2I = "f2i"
	F2S = "f2s"
	F2U = "f2u"
	I2F = "i2f"
	I2S = "i2s"
	I2U = "i2u"
	S2F = "s2f"
	S2I = "s2i"
	S2U = "s2u"
	U2F = "u2f"
	U2I = "u2i"
	U2S = "u2s"
	ADD = "add"
	UADD = "uadd"
	FADD = "fadd"
	SUB = "sub"
	USUB = "usub"
	FSUB = "fsub"
	MUL = "mul"
	UMUL = "umul"
	FMUL = "fmul"
	DIV = "div"
	UDIV = "udiv"
	FDIV = "fdiv"
	EXP = "exp"
	UEXP = "uexp"
	FEXP = "fexp"
	MOD = "mod"
	UMOD = "umod"
	BAND = "band"
	UBAND = "uband"
	BOR = "bor"
	UBOR = "ubor"
	BXOR = "bxor"
	UBXOR = "ubxor"
	BSHIFT_L = "bshl"
	UBSHIFT_L = "ubshl"
	BSHIFT_R = "bshr"
	UBSHIFT_R = "ubshr"
	BSHIFT_R_UNSIGNED = "bshru"
	UBSHIFT_R_UNSIGNED = "ubshru"
	LAND = "land"
	ULAND = "uland"
	LOR = "lor"
	ULOR = "ulor"
	LXOR = "lxor"
	ULXOR = "ulxor"
	MAX = "max"
	UMAX = "umax"
	FMAX = "fmax"
	SMAX = "smax"
	MIN = "min"
	UMIN = "umin"
	FMIN = "fmin"
	SMIN = "smin"
	CAT = "cat"
	SUBSTR = "substr"
	RANGE = "range"
	URANGE = "urange"
	FRANGE = "frange"

class IntrinsicFunctorInfo(NamedTuple):
	symbol: str
	params: tuple[TypeAttribute, ...]
	result: TypeAttribute
	op: FunctorOp
	variadic: bool = False
	multiple_results: bool = False
	
	def param(self, index: int) -> TypeAttribute:
		return self.params[0 if self.variadic else index]
	
	def accepts_arity(self, arity: int) -> bool:
		return self.variadic or arity == len(self.params)
	
	def rank(self):
		""" Sort key that makes the choice among equivalent overloads deterministic. """
		return self.result, self.variadic, self.params
	
	def __str__(self):
		params = ", ".join(p.name for p in self.params)
		if self.variadic: params += "..."
		return "%s(%s)->%s [%s]" % (self.symbol, params, self.result.name, self.op.name)

_S, _I, _U, _F = TypeAttribute.Symbol, TypeAttribute.Signed, TypeAttribute.Unsigned, TypeAttribute.Float

def _op1(symbol, op, param, result):
	return IntrinsicFunctorInfo(symbol, (param,), result, op)

def _op2(symbol, op, kind):
	return IntrinsicFunctorInfo(symbol, (kind, kind), kind, op)

def _integral(symbol, signed, unsigned):
	return [_op2(symbol, signed, _I), _op2(symbol, unsigned, _U)]

def _numeric(symbol, signed, unsigned, floating):
	return _integral(symbol, signed, unsigned) + [_op2(symbol, floating, _F)]

def _variadic(symbol, op, kind):
	return IntrinsicFunctorInfo(symbol, (kind,), kind, op, variadic=True)

def _range(op, kind):
	return IntrinsicFunctorInfo("range", (kind, kind, kind), kind, op, variadic=True, multiple_results=True)

FUNCTOR_INTRINSICS: tuple[IntrinsicFunctorInfo, ...] = tuple([
	# `ord` returns the representation of anything at all.
	*(_op1("ord", FunctorOp.ORD, kind, _I) for kind in TypeAttribute),
	_op1("strlen", FunctorOp.STRLEN, _S, _I),
	_op1("-", FunctorOp.NEG, _I, _I),
	_op1("-", FunctorOp.FNEG, _F, _F),
	_op1("bnot", FunctorOp.BNOT, _I, _I),
	_op1("bnot", FunctorOp.UBNOT, _U, _U),
	_op1("lnot", FunctorOp.LNOT, _I, _I),
	_op1("lnot", FunctorOp.ULNOT, _U, _U),
	
	_op1("to_number", FunctorOp.F2I, _F, _I),
	_op1("to_string", FunctorOp.F2S, _F, _S),
	_op1("to_unsigned", FunctorOp.F2U, _F, _U),
	_op1("to_float", FunctorOp.I2F, _I, _F),
	_op1("to_string", FunctorOp.I2S, _I, _S),
	_op1("to_unsigned", FunctorOp.I2U, _I, _U),
	_op1("to_float", FunctorOp.S2F, _S, _F),
	_op1("to_number", FunctorOp.S2I, _S, _I),
	_op1("to_unsigned", FunctorOp.S2U, _S, _U),
	_op1("to_float", FunctorOp.U2F, _U, _F),
	_op1("to_number", FunctorOp.U2I, _U, _I),
	_op1("to_string", FunctorOp.U2S, _U, _S),
	
	*_numeric("+", FunctorOp.ADD, FunctorOp.UADD, FunctorOp.FADD),
	*_numeric("-", FunctorOp.SUB, FunctorOp.USUB, FunctorOp.FSUB),
	*_numeric("*", FunctorOp.MUL, FunctorOp.UMUL, FunctorOp.FMUL),
	*_numeric("/", FunctorOp.DIV, FunctorOp.UDIV, FunctorOp.FDIV),
	*_numeric("^", FunctorOp.EXP, FunctorOp.UEXP, FunctorOp.FEXP),
	*_integral("%", FunctorOp.MOD, FunctorOp.UMOD),
	*_integral("band", FunctorOp.BAND, FunctorOp.UBAND),
	*_integral("bor", FunctorOp.BOR, FunctorOp.UBOR),
	*_integral("bxor", FunctorOp.BXOR, FunctorOp.UBXOR),
	*_integral("bshl", FunctorOp.BSHIFT_L, FunctorOp.UBSHIFT_L),
	*_integral("bshr", FunctorOp.BSHIFT_R, FunctorOp.UBSHIFT_R),
	*_integral("bshru", FunctorOp.BSHIFT_R_UNSIGNED, FunctorOp.UBSHIFT_R_UNSIGNED),
	*_integral("land", FunctorOp.LAND, FunctorOp.ULAND),
	*_integral("lor", FunctorOp.LOR, FunctorOp.ULOR),
	*_integral("lxor", FunctorOp.LXOR, FunctorOp.ULXOR),
	
	_variadic("max", FunctorOp.MAX, _I),
	_variadic("max", FunctorOp.UMAX, _U),
	_variadic("max", FunctorOp.FMAX, _F),
	_variadic("max", FunctorOp.SMAX, _S),
	_variadic("min", FunctorOp.MIN, _I),
	_variadic("min", FunctorOp.UMIN, _U),
	_variadic("min", FunctorOp.FMIN, _F),
	_variadic("min", FunctorOp.SMIN, _S),
	_variadic("cat", FunctorOp.CAT, _S),
	IntrinsicFunctorInfo("substr", (_S, _I, _I), _S, FunctorOp.SUBSTR),
	_range(FunctorOp.RANGE, _I),
	_range(FunctorOp.URANGE, _U),
	_range(FunctorOp.FRANGE, _F),
])

INFIX_SYMBOLS = frozenset("+ - * / ^ % band bor bxor bshl bshr bshru land lor lxor".split())

def functor_built_in(symbol: str) -> list[IntrinsicFunctorInfo]:
	""" Every overload that goes by the given name. """
	return [info for info in FUNCTOR_INTRINSICS if info.symbol == symbol]

def functor_overloads_of(op: FunctorOp) -> list[IntrinsicFunctorInfo]:
	return [info for info in FUNCTOR_INTRINSICS if info.op is op]

def is_infix_functor(symbol: str, arity: int) -> bool:
	return arity == 2 and symbol in INFIX_SYMBOLS

###############################################################################
# Aggregates

class AggregateOp(Enum):
	COUNT = "count"
	MEAN = "mean"
	SUM = "sum"
	USUM = "usum"
	FSUM = "fsum"
	MIN = "min"
	UMIN = "umin"
	FMIN = "fmin"
	MAX = "max"
	UMAX = "umax"
	FMAX = "fmax"

_AGGREGATE_VARIANTS = {
	AggregateOp.SUM: {TypeAttribute.Signed: AggregateOp.SUM, TypeAttribute.Unsigned: AggregateOp.USUM, TypeAttribute.Float: AggregateOp.FSUM},
	AggregateOp.MIN: {TypeAttribute.Signed: AggregateOp.MIN, TypeAttribute.Unsigned: AggregateOp.UMIN, TypeAttribute.Float: AggregateOp.FMIN},
	AggregateOp.MAX: {TypeAttribute.Signed: AggregateOp.MAX, TypeAttribute.Unsigned: AggregateOp.UMAX, TypeAttribute.Float: AggregateOp.FMAX},
}

def is_overloaded_aggregator(op: AggregateOp) -> bool:
	return op in _AGGREGATE_VARIANTS

def convert_overloaded_aggregator(op: AggregateOp, kind: TypeAttribute) -> AggregateOp:
	assert is_overloaded_aggregator(op), op
	return _AGGREGATE_VARIANTS[op][kind]

###############################################################################
# Binary constraints

class BinaryConstraintOp(Enum):
	EQ = "="
	FEQ = "f="
	NE = "!="
	FNE = "f!="
	LT = "<"
	ULT = "u<"
	FLT = "f<"
	SLT = "s<"
	LE = "<="
	ULE = "u<="
	FLE = "f<="
	SLE = "s<="
	GT = ">"
	UGT = "u>"
	FGT = "f>"
	SGT = "s>"
	GE = ">="
	UGE = "u>="
	FGE = "f>="
	SGE = "s>="
	MATCH = "match"
	CONTAINS = "contains"
	NOT_MATCH = "not_match"
	NOT_CONTAINS = "not_contains"

_B = BinaryConstraintOp

def _ordering(signed, unsigned, floating, symbolic):
	return {TypeAttribute.Signed: signed, TypeAttribute.Unsigned: unsigned, TypeAttribute.Float: floating, TypeAttribute.Symbol: symbolic}

_CONSTRAINT_VARIANTS = {
	# Equality is representation-agnostic except for floats.
	_B.EQ: _ordering(_B.EQ, _B.EQ, _B.FEQ, _B.EQ),
	_B.NE: _ordering(_B.NE, _B.NE, _B.FNE, _B.NE),
	_B.LT: _ordering(_B.LT, _B.ULT, _B.FLT, _B.SLT),
	_B.LE: _ordering(_B.LE, _B.ULE, _B.FLE, _B.SLE),
	_B.GT: _ordering(_B.GT, _B.UGT, _B.FGT, _B.SGT),
	_B.GE: _ordering(_B.GE, _B.UGE, _B.FGE, _B.SGE),
}

SYMBOLIC_CONSTRAINTS = frozenset([_B.MATCH, _B.CONTAINS, _B.NOT_MATCH, _B.NOT_CONTAINS])

def is_overloaded_constraint(op: BinaryConstraintOp) -> bool:
	return op in _CONSTRAINT_VARIANTS

def convert_overloaded_constraint(op: BinaryConstraintOp, kind: TypeAttribute) -> BinaryConstraintOp:
	assert is_overloaded_constraint(op), op
	assert kind in PRIMITIVE_KINDS, "invalid binary constraint overload: %s" % kind.name
	return _CONSTRAINT_VARIANTS[op][kind]
