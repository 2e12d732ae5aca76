"""
Deterministic quotation calculators.

Pure Python math. No I/O.
Given the form fields for a quotation section, produce weights, areas and
a CostBreakdown that PricingEngine turns into a quotation payload.
"""
