"""Test package for the sequence gate.

Pure-logic tests exercise the gate core directly; the smoke tests drive the
pygame shell with SDL's dummy video driver so no real window opens. Run
``pytest`` from the project root.
"""
