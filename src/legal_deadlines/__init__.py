"""
Legal Deadline Derivation Engine
Derives procedural and substantive deadlines from legal case documents
"""

__version__ = "2.0.0"
__author__ = "Legal Tech Solutions"
__description__ = "Template-based legal deadline derivation for DACH and European case files"
