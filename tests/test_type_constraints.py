import unittest
from hornet import syntax
from hornet.operators import AggregateOp, BinaryConstraintOp
from hornet.type_analysis import TypeAnalysis
from hornet.typesystem import TypeEnvironment, TypeSet
from hornet.constraints import Problem
from hornet.type_constraints import TypeConstraints, ClauseTyping, SubtypeOfType, SubtypeOfVar
from specimens import (
	var, wild, num, sym, nil, fun, udf, record, branch, cast, agg,
	atom, neg, cmp, rule, relation, functor, program, type_names,
)

PAIR = syntax.RecordType("Pair", [syntax.Attribute("a", "number"), syntax.Attribute("b", "symbol")])
SHAPE = syntax.AlgebraicDataType("Shape", [
	syntax.BranchType("Circle", [syntax.Attribute("r", "number")]),
	syntax.BranchType("Square", [syntax.Attribute("s", "float")]),
])
RELATIONS = [
	relation("n", "number"), relation("u", "unsigned"), relation("f", "float"), relation("s", "symbol"),
	relation("p", "Pair"), relation("shape", "Shape"), relation("nn", "number", "number"),
]

class LocalSolverTests(unittest.TestCase):
	""" One clause at a time, before any overload has been resolved. """
	
	def generator(self, clause, functors=()) -> TypeConstraints:
		prog = program([clause], relations=RELATIONS, types=[PAIR, SHAPE], functors=functors)
		analysis = TypeAnalysis(prog)
		return TypeConstraints(analysis.env, prog, analysis.branches, analysis.declarations, analysis)
	
	def solve(self, clause, functors=(), trace=None) -> ClauseTyping:
		return self.generator(clause, functors).analyse(clause, trace)
	
	def test_variable_occurrences_share_a_type(self):
		x1, x2 = var("X"), var("X")
		typing = self.solve(rule(atom("n", x1), atom("n", x2)))
		self.assertEqual({"number"}, type_names(typing[x1]))
		self.assertIs(typing[x1], typing[x2])
	
	def test_unconstrained_is_all(self):
		y = var("Y")
		typing = self.solve(rule(atom("n", var("X")), atom("n", var("X")), neg("s", y)))
		self.assertIsNone(type_names(typing[y]))
	
	def test_numeric_constants_follow_their_column(self):
		for rel, expect in [("n", "number"), ("u", "unsigned"), ("f", "float")]:
			with self.subTest(rel):
				c = num("1")
				self.assertEqual({expect}, type_names(self.solve(rule(atom(rel, c)))[c]))
	
	def test_numeric_text_limits_the_candidates(self):
		cases = [
			("1", {"__numberConstant", "__unsignedConstant", "__floatConstant"}),
			("-7", {"__numberConstant", "__floatConstant"}),
			("3000000000", {"__unsignedConstant", "__floatConstant"}),
			("0x10", {"__numberConstant", "__unsignedConstant"}),
			("1.5", {"__floatConstant"}),
			("abc", set()),
		]
		for text, expect in cases:
			with self.subTest(text):
				c = num(text)
				typing = self.solve(rule(atom("n", num("0")), cmp(BinaryConstraintOp.EQ, var("X"), c)))
				self.assertEqual(expect, type_names(typing[c]))
	
	def test_strings_are_symbols(self):
		good, bad = sym("a"), sym("b")
		self.assertEqual({"symbol"}, type_names(self.solve(rule(atom("s", good)))[good]))
		self.assertEqual(set(), type_names(self.solve(rule(atom("n", bad)))[bad]))
	
	def test_negated_variables_are_not_constrained(self):
		x = var("X")
		typing = self.solve(rule(atom("n", x), neg("s", var("X")), neg("s", sym("z"))))
		self.assertEqual({"number"}, type_names(typing[x]))
	
	def test_records(self):
		one, a, rec = num("1"), sym("a"), None
		rec = record(one, a)
		typing = self.solve(rule(atom("p", rec)))
		self.assertEqual({"Pair"}, type_names(typing[rec]))
		self.assertEqual({"number"}, type_names(typing[one]))
		self.assertEqual({"symbol"}, type_names(typing[a]))
	
	def test_record_of_wrong_arity(self):
		rec = record(num("1"))
		self.assertEqual(set(), type_names(self.solve(rule(atom("p", rec)))[rec]))
	
	def test_nil_is_some_record(self):
		x = nil()
		self.assertEqual({"Pair"}, type_names(self.solve(rule(atom("p", x)))[x]))
		y = nil()
		self.assertEqual(set(), type_names(self.solve(rule(atom("n", y)))[y]))
	
	def test_branches(self):
		one, circle = num("1"), None
		circle = branch("Circle", one)
		typing = self.solve(rule(atom("shape", circle)))
		self.assertEqual({"Shape"}, type_names(typing[circle]))
		self.assertEqual({"number"}, type_names(typing[one]))
		two = num("2")
		typing = self.solve(rule(atom("shape", branch("Square", two))))
		self.assertEqual({"float"}, type_names(typing[two]))
	
	def test_casts(self):
		x, good, bad = var("X"), None, None
		good = cast(x, "number")
		typing = self.solve(rule(atom("n", good), atom("s", var("X"))))
		self.assertEqual({"number"}, type_names(typing[good]))
		self.assertEqual({"symbol"}, type_names(typing[x]))
		bad = cast(var("Y"), "nope")
		self.assertEqual(set(), type_names(self.solve(rule(atom("n", bad), atom("n", var("Y"))))[bad]))
	
	def test_counters(self):
		c, i = syntax.Counter(), syntax.IterationCounter()
		typing = self.solve(rule(atom("n", c), cmp(BinaryConstraintOp.EQ, var("I"), i)))
		self.assertEqual({"number"}, type_names(typing[c]))
		self.assertEqual({"__unsignedConstant"}, type_names(typing[i]))
	
	def test_count_and_mean(self):
		count, mean = agg(AggregateOp.COUNT, None, atom("s", wild())), agg(AggregateOp.MEAN, var("Y"), atom("f", var("Y")))
		typing = self.solve(rule(atom("n", var("N")), cmp(BinaryConstraintOp.EQ, var("N"), count), cmp(BinaryConstraintOp.EQ, var("M"), mean)))
		self.assertEqual({"number"}, type_names(typing[count]))
		self.assertEqual({"float"}, type_names(typing[mean]))
	
	def test_infix_functor_shares_base_type(self):
		x, one, plus = var("X"), num("1"), None
		plus = fun("+", x, one)
		typing = self.solve(rule(atom("n", plus), atom("n", var("X"))))
		self.assertEqual({"number"}, type_names(typing[plus]))
		self.assertEqual({"number"}, type_names(typing[x]))
		self.assertEqual({"__numberConstant"}, type_names(typing[one]))
	
	def test_single_overload_narrows_arguments(self):
		x, cat = var("X"), None
		cat = fun("cat", x, sym("a"))
		typing = self.solve(rule(atom("s", cat), atom("s", var("X"))))
		self.assertEqual({"symbol"}, type_names(typing[cat]))
		self.assertEqual({"symbol"}, type_names(typing[x]))
	
	def test_no_overload_leaves_no_type(self):
		length = fun("strlen", var("X"))
		typing = self.solve(rule(atom("n", length), atom("n", var("X"))))
		self.assertEqual(set(), type_names(typing[length]))
	
	def test_user_functor_declarations(self):
		call = udf("f", var("X"))
		typing = self.solve(rule(atom("s", call), atom("n", var("X"))), functors=[functor("f", ["number"], "symbol")])
		self.assertEqual({"symbol"}, type_names(typing[call]))
		unknown = udf("g", var("X"))
		typing = self.solve(rule(atom("n", var("X")), cmp(BinaryConstraintOp.EQ, var("Y"), unknown)))
		self.assertIsNone(type_names(typing[unknown]))
	
	def test_trace_shows_problem_and_solution(self):
		trace = []
		self.solve(rule(atom("n", var("X"))), trace=trace)
		self.assertTrue(trace[0].startswith("Clause: n(X)."))
		self.assertTrue(trace[1].startswith("Problem:"))
		self.assertTrue(trace[2].startswith("Solution:"))
		self.assertIn("t_X", trace[2])
	
	def test_typing_transplants_onto_a_clone(self):
		clause = rule(atom("p", record(num("1"), var("S"))), atom("s", var("S")))
		typing = self.solve(clause)
		twin = clause.clone()
		moved = typing.transplant(twin)
		self.assertEqual(typing.type_sets, moved.type_sets)
		self.assertEqual({"symbol"}, type_names(moved[twin.body[0].arguments[0]]))
	
	def test_transplant_refuses_a_different_shape(self):
		typing = self.solve(rule(atom("n", var("X"))))
		with self.assertRaises(AssertionError):
			typing.transplant(rule(atom("nn", var("X"), var("Y"))))
	
	def test_clone_solves_the_same(self):
		clause = rule(atom("nn", var("X"), fun("+", var("X"), num("2"))), atom("p", record(var("X"), sym("b"))))
		# Types are compared by identity, so both solves must share one environment.
		generator = self.generator(clause)
		self.assertEqual(generator.analyse(clause).type_sets, generator.analyse(clause.clone()).type_sets)

class ProblemTests(unittest.TestCase):
	""" The solver itself, away from any clause. """
	
	def setUp(self):
		self.env = TypeEnvironment()
		self.number = self.env.get_type("number")
		self.unsigned = self.env.get_type("unsigned")
	
	def test_narrowing_propagates(self):
		problem = Problem()
		a, b, c = problem.variable("a"), problem.variable("b"), problem.variable("c")
		problem.add(SubtypeOfVar(c, b))
		problem.add(SubtypeOfVar(b, a))
		problem.add(SubtypeOfType(a, self.number))
		solution = problem.solve()
		for v in a, b, c:
			self.assertEqual(TypeSet.of(self.number), solution[v])
	
	def test_contradiction_is_empty_not_fatal(self):
		problem = Problem()
		a = problem.variable("a")
		problem.add(SubtypeOfType(a, self.number))
		problem.add(SubtypeOfType(a, self.unsigned))
		self.assertTrue(problem.solve()[a].empty())
	
	def test_untouched_variable_is_all(self):
		problem = Problem()
		self.assertTrue(problem.solve()[problem.variable("lonely")].is_all())
	
	def test_rendering(self):
		problem = Problem()
		a = problem.variable("a")
		problem.add(SubtypeOfType(a, self.number))
		self.assertEqual("{\n   t_a <: number\n}", str(problem))
		self.assertEqual("{\n   t_a = {number}\n}", problem.solve().render([a]))

if __name__ == '__main__':
	unittest.main()
