"""Routing: ordered route table with first-match-wins dispatch.

Routes are registered during setup and scanned in registration order
for every request.
"""
