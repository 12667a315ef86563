"""LoanLens Agents - Document analysis components"""
