"""
Airline Assistant

A chat service for airline customers that routes each question to live flight
offers or to knowledge scraped from the airline's policy pages, and answers
through an LLM completion grounded on what was retrieved.
"""

__version__ = "1.0.0"
__author__ = "Airline Assistant Team"
