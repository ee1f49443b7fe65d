import unittest
from hornet import syntax
from hornet.ontology import Argument, each_node, each_argument
from hornet.operators import AggregateOp, BinaryConstraintOp, NumericKind
from specimens import var, wild, num, sym, fun, udf, record, branch, cast, agg, atom, neg, cmp, rule

def _specimen():
	return rule(
		atom("r", var("X"), fun("+", var("Y"), num("1"))),
		atom("s", var("X"), record(var("Y"), sym("hi"))),
		neg("t", wild()),
		cmp(BinaryConstraintOp.LT, var("Y"), agg(AggregateOp.MAX, var("Z"), atom("u", var("Z")))),
	)

class TreeModelTests(unittest.TestCase):
	
	def test_children_in_declared_order(self):
		f = fun("+", var("A"), num("2"))
		self.assertEqual(["A", "2"], [str(c) for c in f.children()])
		a = agg(AggregateOp.COUNT, None, atom("u", wild()))
		self.assertEqual([syntax.Atom], [type(c) for c in a.children()])
	
	def test_traversal_is_preorder(self):
		kinds = [type(n).__name__ for n in each_node(_specimen())][:6]
		self.assertEqual(["Clause", "Atom", "Variable", "IntrinsicFunctor", "Variable", "NumericConstant"], kinds)
	
	def test_clone_is_deep_and_equal(self):
		original = _specimen()
		twin = original.clone()
		self.assertTrue(original.equals(twin))
		self.assertEqual(str(original), str(twin))
		for a, b in zip(each_node(original), each_node(twin)):
			with self.subTest(str(a)):
				self.assertIsNot(a, b)
				self.assertIs(type(a), type(b))
		self.assertEqual(len(list(each_argument(original))), len(list(each_argument(twin))))
	
	def test_equality_is_structural_but_identity_keys_dicts(self):
		a, b = num("1"), num("1")
		self.assertTrue(a.equals(b))
		self.assertNotEqual(a, b)
		self.assertEqual(2, len({a: 1, b: 2}))
		self.assertFalse(num("1").equals(num("1", NumericKind.Float)))
		self.assertFalse(num("1").equals(sym("1")))
		self.assertFalse(fun("+", var("A")).equals(fun("+", var("A"), var("B"))))
	
	def test_apply_rewrites_children(self):
		clause = _specimen()
		def rename(node):
			node.apply(rename)
			if isinstance(node, syntax.Variable): return syntax.Variable(node.name.lower())
			return node
		clause.apply(rename)
		self.assertEqual('r(x,(y+1)) :- s(x,[y,"hi"]), !t(_), y < max z : { u(z) }.', str(clause))
	
	def test_apply_with_identity_changes_nothing(self):
		clause = _specimen()
		twin = clause.clone()
		clause.apply(lambda n: n)
		self.assertTrue(clause.equals(twin))
	
	def test_surface_syntax(self):
		cases = [
			(cast(var("X"), "number"), "as(X, number)"),
			(branch("Circle", num("1")), "$Circle(1)"),
			(udf("f", var("X"), sym("a")), '@f(X,"a")'),
			(fun("cat", sym("a"), sym("b")), 'cat("a","b")'),
			(cmp(BinaryConstraintOp.MATCH, sym("a.*"), var("S")), 'match("a.*", S)'),
			(syntax.NilConstant(), "nil"),
			(syntax.Counter(), "$"),
		]
		for node, text in cases:
			with self.subTest(text):
				self.assertEqual(text, str(node))
	
	def test_every_argument_kind_is_an_argument(self):
		for kind in syntax.ARGUMENT_KINDS:
			with self.subTest(kind.__name__):
				self.assertTrue(issubclass(kind, Argument))

if __name__ == '__main__':
	unittest.main()
