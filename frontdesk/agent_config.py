"""Voice agent definition sent to the voice platform on call start.

The prompt, the function schemas and the voice behaviour settings are
rendered from the company profile in :class:`Settings`.
"""

from __future__ import annotations

from typing import Any

from frontdesk.config import Settings
from frontdesk.models.session import ServiceType

SERVICE_TYPES = [s.value for s in ServiceType]

SYSTEM_PROMPT = """You are a friendly and professional receptionist for {company_name}, a trusted plumbing company serving {service_area}. Your job is to:

1. Greet callers warmly
2. Understand their plumbing problem or emergency
3. Collect what is needed to schedule a service visit
4. Book the appointment in the calendar
5. Answer basic questions about our services

PERSONALITY:
- Warm, calm and professional; plumbing emergencies are stressful
- Listen carefully and keep the call moving without rushing
- Speak clearly and at a moderate pace

INFORMATION TO COLLECT:
1. Full name
2. Phone number for a call back
3. Email address (optional, for the confirmation)
4. Service address
5. Type of problem or service needed
6. Whether it is an emergency
7. Preferred date and time

SERVICES WE OFFER:
- Emergency plumbing, 24/7 (burst pipes, major leaks, sewage backups)
- Drain cleaning and clog removal
- Water heater repair and installation
- Leak detection and repair
- Fixture installation (faucets, toilets, sinks)
- General plumbing maintenance and repairs

BUSINESS HOURS:
- Regular appointments: Monday-Friday, 8 AM - 6 PM
- Saturday: 9 AM - 2 PM
- Emergency service available 24/7

SCRIPT GUIDELINES:
- Opening: "Thank you for calling {company_name}! This is your virtual assistant. How can I help you today?"
- Emergencies: show urgency and get the address and problem first
- Scheduling: ask for a preferred date, then call check_availability before offering times
- Closing: read back every detail and confirm the booking

RULES:
- Never quote prices ("A technician will provide a detailed quote on-site")
- Never promise arrival times for unscheduled visits
- For complex problems, offer a call back from a specialist
- Always confirm the service address before booking
- If a booking fails, tell the caller the office will call them back"""

EMERGENCY_PROMPT = """
EMERGENCY PROTOCOL:
This is an EMERGENCY call. Follow these steps:
1. Stay calm but convey urgency
2. Immediately ask: "What is the emergency and what is your address?"
3. Get their phone number for immediate callback
4. Assure them help is on the way
5. Ask them to describe what they see (water flow, location of leak, etc.)
6. Give safety advice where it applies (turn off the water main, etc.)
7. Let them know a technician will call within 15 minutes
"""


def function_schemas() -> list[dict[str, Any]]:
    """JSON schemas for the functions the agent may call."""
    return [
        {
            "name": "book_appointment",
            "description": "Book a plumbing service appointment in the calendar",
            "parameters": {
                "type": "object",
                "properties": {
                    "customerName": {"type": "string", "description": "Customer's full name"},
                    "customerPhone": {"type": "string", "description": "Customer's phone number"},
                    "customerEmail": {
                        "type": "string",
                        "description": "Customer's email address (optional)",
                    },
                    "serviceType": {
                        "type": "string",
                        "enum": SERVICE_TYPES,
                        "description": "Type of plumbing service needed",
                    },
                    "description": {
                        "type": "string",
                        "description": "Detailed description of the plumbing issue",
                    },
                    "address": {
                        "type": "string",
                        "description": "Service address where the plumber should go",
                    },
                    "dateTime": {
                        "type": "string",
                        "format": "date-time",
                        "description": "Appointment date and time in ISO format",
                    },
                },
                "required": ["customerName", "customerPhone", "serviceType", "address", "dateTime"],
            },
        },
        {
            "name": "check_availability",
            "description": "Check available appointment slots for a specific date",
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {
                        "type": "string",
                        "format": "date",
                        "description": "The date to check availability for (YYYY-MM-DD format)",
                    },
                },
                "required": ["date"],
            },
        },
        {
            "name": "get_service_info",
            "description": "Get information about a specific plumbing service",
            "parameters": {
                "type": "object",
                "properties": {
                    "serviceType": {
                        "type": "string",
                        "enum": SERVICE_TYPES,
                        "description": "Type of service to get information about",
                    },
                },
            },
        },
        {
            "name": "update_customer_info",
            "description": "Update customer information during the call",
            "parameters": {
                "type": "object",
                "properties": {
                    "customerName": {"type": "string"},
                    "customerPhone": {"type": "string"},
                    "customerEmail": {"type": "string"},
                    "address": {"type": "string"},
                    "serviceType": {"type": "string", "enum": SERVICE_TYPES},
                    "issueDescription": {"type": "string"},
                    "preferredDate": {"type": "string"},
                    "preferredTime": {"type": "string"},
                },
            },
        },
    ]


def get_emergency_prompt() -> str:
    return EMERGENCY_PROMPT.strip()


def get_agent_prompt(settings: Settings) -> dict[str, Any]:
    """Full agent definition for the ``config`` message and the dashboard."""
    return {
        "name": f"{settings.company_name} Receptionist",
        "voice": "jennifer",
        "language": "en-US",
        "systemPrompt": SYSTEM_PROMPT.format(
            company_name=settings.company_name,
            service_area=settings.service_area,
        ),
        "emergencyProtocol": get_emergency_prompt(),
        "functions": function_schemas(),
        # Turn-taking
        "responsiveness": 0.8,
        "interruptSensitivity": 0.6,
        "enableBackchannel": True,
        "backchannelFrequency": 0.3,
        # Voice
        "voiceSpeed": 1.0,
        "voiceTemperature": 0.7,
        # Conversation limits
        "maxCallDuration": 600,
        "silenceTimeout": 10,
        "endCallPhrases": [
            "goodbye",
            "thank you bye",
            "have a good day",
            "thanks for calling",
        ],
    }


def get_company_info(settings: Settings) -> dict[str, Any]:
    return {
        "name": settings.company_name,
        "phone": settings.company_phone,
        "serviceArea": settings.service_area,
        "businessHours": {
            "weekdays": "8:00 AM - 6:00 PM",
            "saturday": "9:00 AM - 2:00 PM",
            "sunday": "Emergency only",
            "emergency": "24/7",
        },
    }
