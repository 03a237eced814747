"""Voice-call front desk for a plumbing company.

Receives real-time call events from the voice platform, keeps per-call
state, answers the agent's function calls and books appointments on
Google Calendar.
"""
