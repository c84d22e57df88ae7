"""
Pydantic schemas for the ClaimDesk API.
"""
