"""Multiplication quiz rules.

``problems`` draws operands per difficulty tier, ``scoring`` reads and
grades typed answers, ``state`` holds the round snapshot and its
transitions, and ``scheduler`` runs the countdown and the pause before
the next problem.
"""
