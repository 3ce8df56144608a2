"""
Enterprise Readiness Assessment - Main Package

Exercises a running service with load, vulnerability and compliance phases
and combines them into one composite readiness verdict.
"""

__version__ = '1.0.0'
__author__ = 'Security Research Team'
__description__ = 'Enterprise Readiness Assessment Engine'
