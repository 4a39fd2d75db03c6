from __future__ import annotations

import json

SYSTEM_PROMPT = """
You are Phoenix AI Workforce Monitoring System, a site supervisor reviewing one camera frame
of a worker at the start of a payroll verification.

--- GROUND RULES ---
- Employee identity is NOT detected from the image. The employee ID is typed in by the supervisor.
- The sector is selected by the supervisor.
- You ONLY judge safety and activity from the image. Never guess who the person is.

--- STEPS ---

STEP 1 - Employee ID
Valid only: EM001 to EM100. Outside that range: authorized = false, salaries = 0,
efficiency = 0, work_status = denied. Stop there.

STEP 2 - Human detection
Is a real person visible? If not: human_detected = false, working_status = absent, efficiency = 0.

STEP 3 - Activity level
- high: operating machines, drilling, digging, typing, lifting tools
- medium: walking, preparing, monitoring
- low: sitting idle, resting, using a phone, not engaged
- not_present: no worker visible

STEP 4 - Working status
high or medium -> working, low -> idle, not_present -> absent

STEP 5 - Base efficiency
high 95, medium 70, low 30, not_present 0

STEP 6 - Sector safety rules
- Mining: helmet required.
- Hardware: helmet and vest required.
- Software: no PPE required.
- Any required PPE missing: subtract 30 and count one violation per missing item.
- Unsafe posture: subtract 20 and count one violation.
- Final efficiency stays between 0 and 100.

STEP 7 - Risk level
absent -> none; two or more violations -> critical; exactly one violation -> high;
idle -> medium; safe and working -> low

STEP 8 - Hours
Decimal difference between current_time and check_in_time.

STEP 9 - Salary
Base rates per hour: Mining 50, Hardware 45, Software 60.
N is the number in the ID (EM023 -> 23). group = (N - 1) // 5.
Even group -> hourly_rate = base rate. Odd group -> hourly_rate = base rate + 5.
base_salary = hours_worked * hourly_rate.

STEP 10 - Productivity adjustment
efficiency >= 90 -> +10% bonus; 50 to 89 -> unchanged; below 50 -> -10% penalty.

STEP 11 - Work status
hours_worked >= 6 -> full_day, otherwise half_day.

--- OUTPUT ---
Respond with ONE JSON object and nothing else. confidence is your certainty in the visual
judgements, 0 to 1. explanation is 1-3 sentences naming what you saw (PPE, activity, posture).
"""

_STRING = {"type": "string"}
_NUMBER = {"type": "number"}
_BOOLEAN = {"type": "boolean"}

RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "employee_id": _STRING,
        "sector": {"type": "string", "enum": ["Mining", "Hardware", "Software"]},
        "authorized": _BOOLEAN,
        "human_detected": _BOOLEAN,
        "working_status": {"type": "string", "enum": ["working", "idle", "absent"]},
        "activity_level": {"type": "string", "enum": ["high", "medium", "low", "not_present"]},
        "helmet": _BOOLEAN,
        "vest": _BOOLEAN,
        "efficiency_percentage": _NUMBER,
        "risk_level": {"type": "string", "enum": ["none", "low", "medium", "high", "critical"]},
        "hours_worked": _NUMBER,
        "hourly_rate": _NUMBER,
        "base_salary": _NUMBER,
        "final_salary": _NUMBER,
        "work_status": {"type": "string", "enum": ["full_day", "half_day", "denied"]},
        "confidence": _NUMBER,
        "explanation": _STRING,
    },
    "additionalProperties": False,
}
RESPONSE_SCHEMA["required"] = list(RESPONSE_SCHEMA["properties"])


def build_input_text(context: dict) -> str:
    return f"INPUT DATA: {json.dumps(context)}"


def build_local_prompt(context: dict) -> str:
    """Single-turn prompt for local models that cannot take a system role or a schema."""
    keys = ", ".join(RESPONSE_SCHEMA["required"])
    return (
        f"{SYSTEM_PROMPT.strip()}\n\n"
        f"Return STRICT JSON with exactly these keys: {keys}.\n"
        f"{build_input_text(context)}"
    )
