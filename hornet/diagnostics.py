"""
Everything to do with telling the user what went wrong (or, when asked, what went right).
Type errors pile up here rather than being thrown one at a time,
so a single run surfaces every problem in the program at once.
"""
import sys, random
from functools import lru_cache
from typing import Sequence, Any, Optional
from boozetools.support.failureprone import SourceText, illustration

from .ontology import Node, Argument
from .typesystem import TypeSet
from . import syntax

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Hmm, ", "", ""]
	grumbles = [
		'Bother', 'Blast', 'Botheration', 'Buzz off', 'Drat',
		'Fiddlesticks', 'Goodness', 'Heavens', 'Nuts', 'Rats',
		'Sting and Stinger', 'Waspish Whiskers',
	]
	resignations = [
		'The types do not line up.',
		'I cannot make these types agree.',
		'This program does not type-check.',
		'Something here has no type at all.',
	]
	return "%s%s! %s" % tuple(map(random.choice, (particle, grumbles, resignations)))

class Report:
	""" The accumulated issues of one run, plus the verbosity-gated chatter. """
	_issues: list["Pic"]
	
	def __init__(self, *, verbose: int = 0, max_issues: Optional[int] = None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues
	
	def ok(self): return not self._issues
	
	@property
	def issues(self) -> Sequence["Pic"]: return tuple(self._issues)
	
	def issue(self, it: Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)
	
	def info(self, *args, level=1):
		if self._verbose >= level:
			print(*args, file=sys.stderr)
	
	def complain_to_console(self):
		_bemoan(self._issues)
	
	def assert_no_issues(self, message):
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst() + " " + message)
	
	# Methods the type checker calls:
	
	def no_type(self, clause: syntax.Clause, arg: Argument):
		intro = "This expression can have no type in clause %s" % clause
		self.issue(Pic(intro, [Annotation(arg, "no type fits here")]))
	
	def no_functor_overload(self, clause: syntax.Clause, fun: syntax.IntrinsicFunctor, types: Sequence[TypeSet]):
		intro = "No overload of '%s' fits these arguments in clause %s" % (fun.symbol, clause)
		footer = ["Argument types were: " + ", ".join(map(str, types))]
		self.issue(Pic(intro, [Annotation(fun)], footer))
	
	def unresolved_constant(self, clause: syntax.Clause, nc: syntax.NumericConstant):
		intro = "Cannot settle on a numeric kind for this constant in clause %s" % clause
		self.issue(Pic(intro, [Annotation(nc, nc.text)]))
	
	def undeclared_functor(self, clause: syntax.Clause, call):
		intro = "Nobody declared the user-defined %s '%s'" % (_what_call(call), call.name)
		self.issue(Pic(intro, [Annotation(call)], ["in clause %s" % clause]))
	
	def ill_declared_functor(self, clause: syntax.Clause, call, decl: syntax.FunctorDeclaration):
		intro = "The declaration of '%s' mentions types nobody declared" % call.name
		self.issue(Pic(intro, [Annotation(call), Annotation(decl, "declared here")], ["in clause %s" % clause]))
	
	def undeclared_cast_type(self, clause: syntax.Clause, cast: syntax.TypeCast):
		intro = "Cannot cast to undeclared type '%s'" % cast.type_name
		self.issue(Pic(intro, [Annotation(cast)], ["in clause %s" % clause]))

def _what_call(call):
	return "aggregate" if isinstance(call, syntax.UserDefinedAggregator) else "functor"

class Annotation:
	"""
	Points at a node. Nodes that came from a file get the usual
	underlined illustration; synthetic nodes are shown as Datalog text.
	"""
	def __init__(self, node: Node, caption: str = ""):
		self.node = node
		self.caption = caption
		self.path = node.span.path if node.span else None
	
	def illustrate(self):
		span = self.node.span
		if span is None:
			text = "       | %s" % self.node
			return text + ("  <-- " + self.caption if self.caption else "")
		source = _fetch(self.path)
		row, col = source.find_row_col(span.start)
		single_line = source.line_of_text(row)
		width = max(1, span.stop - span.start)
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro: str, anns: list[Annotation], footer=()):
		self.intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self.intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				lines.append(str(path))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)
	def __str__(self): return self.intro

@lru_cache(5)
def _fetch(path) -> SourceText:
	with open(path, "r", encoding="utf-8") as fh:
		return SourceText(fh.read(), filename=str(path))

def _bemoan(issues):
	if issues:
		print("*" * 60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -" * 20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
