"""
A small, generic constraint system over TypeSets.

A Problem is a list of constraints among type variables.
Solving starts every variable at "all" (knows nothing) and
lets each constraint narrow its variables, round after round,
until a whole round goes by in which nothing changes.

Every constraint here only ever narrows, and the lattice below any
starting point is finite, so the solver stops. Nothing here raises
on contradiction: a variable that runs out of candidates just ends
up holding the empty TypeSet, and somebody else complains later.
"""
from abc import ABC, abstractmethod
from typing import Iterable, Optional
from .typesystem import TypeSet

class TypeVar:
	""" These have identity and are hashable, which does the job. """
	def __init__(self, label: str):
		self.label = label
	def __str__(self): return "t_" + self.label
	__repr__ = __str__

class Assignment:
	""" The current state of knowledge: a TypeSet per variable. """
	def __init__(self):
		self._values: dict[TypeVar, TypeSet] = {}
	def __getitem__(self, var: TypeVar) -> TypeSet:
		return self._values.get(var, TypeSet.all())
	def __setitem__(self, var: TypeVar, value: TypeSet):
		assert isinstance(value, TypeSet), value
		self._values[var] = value
	def narrow(self, var: TypeVar, value: TypeSet) -> bool:
		""" Install a new value; report whether it differs from the old one. """
		if self[var] == value: return False
		self[var] = value
		return True
	def render(self, variables: Iterable[TypeVar]) -> str:
		lines = ["   %s = %s" % (v, self[v]) for v in variables]
		return "{\n%s\n}" % ",\n".join(lines)

class Constraint(ABC):
	@abstractmethod
	def update(self, assignment: Assignment) -> bool:
		""" Narrow the assignment to satisfy this constraint; return True on any change. """
	@abstractmethod
	def __str__(self) -> str: pass

class Problem:
	def __init__(self):
		self.constraints: list[Constraint] = []
		self.variables: list[TypeVar] = []
	
	def variable(self, label: str) -> TypeVar:
		var = TypeVar(label)
		self.variables.append(var)
		return var
	
	def add(self, constraint: Constraint):
		self.constraints.append(constraint)
	
	def solve(self, trace: Optional[list[str]] = None) -> Assignment:
		assignment = Assignment()
		changed = True
		while changed:
			changed = False
			for c in self.constraints:
				changed |= c.update(assignment)
		if trace is not None:
			trace.append("Problem:\n" + str(self))
			trace.append("Solution:\n" + assignment.render(self.variables))
		return assignment
	
	def __str__(self):
		return "{\n%s\n}" % ",\n".join("   %s" % c for c in self.constraints)
