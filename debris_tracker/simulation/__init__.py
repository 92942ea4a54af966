"""
Simulation layer: record classification, position propagation and the
tick-loop controller.
"""
