"""Matrix expansion engine.

Turns a build matrix (variable -> candidate values) into the ordered list of
axes a pipeline runs, one build per axis, with caps on variables and axes.
"""
