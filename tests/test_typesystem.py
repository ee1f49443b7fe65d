import unittest
from hornet import syntax
from hornet.operators import TypeAttribute
from hornet.typesystem import (
	TypeEnvironment, TypeSet, is_subtype_of, greatest_common_subtypes,
	type_attribute, is_of_kind, has_kind, base_type, skip_aliases,
)
from hornet.environment import build_type_environment, SumTypeBranches, FunctorDeclarations
from specimens import program, functor, udf

def _env(*types):
	return build_type_environment(program([], types=types))

class TypeSetTests(unittest.TestCase):
	
	def setUp(self):
		self.env = TypeEnvironment()
		self.number = self.env.get_type("number")
		self.symbol = self.env.get_type("symbol")
	
	def test_all_is_identity_for_intersection(self):
		some = TypeSet.of(self.number)
		self.assertEqual(some, TypeSet.all().intersection(some))
		self.assertEqual(some, some.intersection(TypeSet.all()))
	
	def test_all_absorbs_union(self):
		self.assertTrue(TypeSet.of(self.number).union(TypeSet.all()).is_all())
	
	def test_set_equality(self):
		self.assertEqual(TypeSet.of(self.number, self.symbol), TypeSet.of(self.symbol, self.number))
		self.assertNotEqual(TypeSet(), TypeSet.all())
		self.assertTrue(TypeSet().empty())
		self.assertFalse(TypeSet.all().empty())
	
	def test_rendering(self):
		self.assertEqual("{number,symbol}", str(TypeSet.of(self.symbol, self.number)))
		self.assertEqual("{ - all types - }", str(TypeSet.all()))
		self.assertEqual("{}", str(TypeSet()))
	
	def test_filter_leaves_all_alone_unless_told(self):
		self.assertTrue(TypeSet.all().filter(lambda t: False).is_all())
		self.assertEqual(TypeSet(), TypeSet.all().filter(lambda t: False, TypeSet()))

class LatticeTests(unittest.TestCase):
	
	def setUp(self):
		self.env = _env(
			syntax.SubsetType("Even", "number"),
			syntax.AliasType("Name", "symbol"),
			syntax.UnionType("Id", ["Even", "number"]),
			syntax.SubsetType("Fine", "float"),
		)
		self.t = self.env.get_type
	
	def test_built_in_types_exist(self):
		for name in ["number", "unsigned", "float", "symbol", "__numberConstant", "__unsignedConstant", "__floatConstant", "__symbolConstant"]:
			with self.subTest(name):
				self.assertTrue(self.env.is_type(name))
	
	def test_subtyping(self):
		t = self.t
		self.assertTrue(is_subtype_of(t("Even"), t("number")))
		self.assertTrue(is_subtype_of(t("Even"), t("__numberConstant")))
		self.assertFalse(is_subtype_of(t("number"), t("Even")))
		self.assertTrue(is_subtype_of(t("Name"), t("symbol")))
		self.assertTrue(is_subtype_of(t("symbol"), t("Name")))
		self.assertTrue(is_subtype_of(t("Even"), t("Id")))
		self.assertTrue(is_subtype_of(t("Id"), t("number")))
		self.assertFalse(is_subtype_of(t("Fine"), t("number")))
	
	def test_greatest_common_subtypes(self):
		t = self.t
		self.assertEqual(TypeSet.of(t("Even")), greatest_common_subtypes(t("Even"), t("number")))
		self.assertEqual(TypeSet.of(t("Even")), greatest_common_subtypes(t("number"), t("Even")))
		self.assertEqual(TypeSet(), greatest_common_subtypes(t("number"), t("symbol")))
		self.assertEqual(TypeSet.of(t("Even")), greatest_common_subtypes(TypeSet.all(), TypeSet.of(t("Even"))))
		both = TypeSet.of(t("Even"), t("Fine"))
		self.assertEqual(TypeSet.of(t("Fine")), greatest_common_subtypes(both, TypeSet.of(t("float"))))
	
	def test_kinds(self):
		t = self.t
		self.assertEqual(TypeAttribute.Signed, type_attribute(t("Even")))
		self.assertEqual(TypeAttribute.Symbol, type_attribute(t("Name")))
		self.assertEqual(TypeAttribute.Float, type_attribute(t("Fine")))
		self.assertEqual(TypeAttribute.Signed, type_attribute(t("Id")))
		self.assertTrue(is_of_kind(t("Even"), TypeAttribute.Signed))
		self.assertFalse(is_of_kind(t("Even"), TypeAttribute.Unsigned))
		self.assertTrue(has_kind(TypeSet.all(), TypeAttribute.Float))
		self.assertFalse(has_kind(TypeSet(), TypeAttribute.Float))
	
	def test_base_and_alias(self):
		t = self.t
		self.assertIs(t("__numberConstant"), base_type(t("Even")))
		self.assertIs(t("symbol"), skip_aliases(t("Name")))

class EnvironmentTests(unittest.TestCase):
	
	def test_declaration_order_does_not_matter(self):
		env = _env(syntax.SubsetType("B", "A"), syntax.SubsetType("A", "number"))
		self.assertTrue(is_subtype_of(env.get_type("B"), env.get_type("number")))
	
	def test_recursive_record(self):
		env = _env(syntax.RecordType("List", [syntax.Attribute("head", "number"), syntax.Attribute("tail", "List")]))
		lst = env.get_type("List")
		self.assertEqual([env.get_type("number"), lst], lst.fields)
		self.assertEqual(TypeAttribute.Record, type_attribute(lst))
		self.assertIn(lst, env.record_types())
	
	def test_undeclared_targets_make_no_type(self):
		env = _env(syntax.SubsetType("Bad", "nope"), syntax.AliasType("Worse", "Bad"))
		self.assertFalse(env.is_type("Bad"))
		self.assertFalse(env.is_type("Worse"))
	
	def test_circular_subsets_make_no_type(self):
		env = _env(syntax.SubsetType("P", "Q"), syntax.SubsetType("Q", "P"))
		self.assertFalse(env.is_type("P"))
		self.assertFalse(env.is_type("Q"))
	
	def test_branches_know_their_owner(self):
		shape = syntax.AlgebraicDataType("Shape", [
			syntax.BranchType("Circle", [syntax.Attribute("r", "number")]),
			syntax.BranchType("Dot"),
		])
		prog = program([], types=[shape])
		env = build_type_environment(prog)
		branches = SumTypeBranches(env, prog)
		self.assertIs(env.get_type("Shape"), branches.get_type("Circle"))
		self.assertIs(env.get_type("Shape"), branches.get_type("Dot"))
		self.assertIsNone(branches.get_type("Square"))
		self.assertEqual([env.get_type("number")], env.get_type("Shape").branch("Circle").types)
		self.assertEqual(TypeAttribute.ADT, type_attribute(env.get_type("Shape")))
	
	def test_functor_lookup_reports_absence(self):
		declarations = FunctorDeclarations(program([], functors=[functor("f", ["number"], "symbol", stateful=True)]))
		self.assertIsNotNone(declarations.declaration(udf("f")))
		self.assertIsNone(declarations.declaration(udf("g")))
		self.assertTrue(declarations.is_stateful(udf("f")))
		self.assertFalse(declarations.is_stateful(udf("g")))

if __name__ == '__main__':
	unittest.main()
