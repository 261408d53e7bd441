"""
Cost rates for project financials.

Hourly labor rates by role, unit costs for materials, daily rental rates
for tools and the project type/priority adjustments used to price
timeline entries. Roles, materials and tools not listed fall back to a
default rate.
"""

from typing import Any, Dict, List, Mapping, Tuple

from .rules import expense_total, to_number


# ==================== Rate Tables ====================

# Hourly rates
WORKER_RATES = {
    "General Laborer": 15,
    "Carpenter": 25,
    "Mason/Bricklayer": 28,
    "Electrician": 35,
    "Plumber": 32,
    "Painter": 20,
    "Crane Operator": 45,
    "Heavy Equipment Operator": 40,
    "Welder": 30,
    "Roofer": 24,
    "Framer": 26,
    "HVAC Technician": 33,
    "Safety Inspector": 38,
    "Site Supervisor": 42,
    "Traffic Controller": 18,
    "Concrete Worker": 22,
    "Glazier": 29,
    "Power Line Technician": 48,
    "Maintenance Worker": 19,
    "Landscaper": 17,
}

ENGINEER_RATES = {
    "Structural Engineering": 75,
    "Civil Engineering": 70,
    "Electrical Engineering": 68,
    "Mechanical Engineering": 65,
    "Environmental Engineering": 72,
    "Transportation Engineering": 74,
    "Geotechnical Engineering": 78,
    "Industrial Engineering": 66,
    "Fire Protection Engineering": 80,
    "Construction Technology": 62,
    "Project Engineering": 69,
    "Systems Engineering": 77,
    "HVAC Engineering": 64,
    "Lighting Design": 58,
    "Acoustical Engineering": 71,
    "Forensic Engineering": 85,
}

ARCHITECT_RATES = {
    "Commercial Architecture": 82,
    "Residential Architecture": 75,
    "Industrial Architecture": 78,
    "Landscape Architecture": 65,
    "Historic Preservation": 88,
    "Universal Design": 72,
    "Sustainable Design": 80,
    "Healthcare Architecture": 90,
    "Educational Architecture": 76,
    "Hospitality Architecture": 84,
    "Retail Architecture": 70,
    "Cultural Architecture": 86,
    "High-rise Design": 95,
    "Modern/Contemporary": 73,
    "CAD/BIM Specialist": 55,
    "Interior Architecture": 68,
}

# list field -> (role label, field naming the role, rate table, default rate)
LABOR_RATE_TABLES = {
    "tworker": ("Worker", "role", WORKER_RATES, 15),
    "tengineer": ("Engineer", "specialty", ENGINEER_RATES, 70),
    "tarchitect": ("Architect", "specialty", ARCHITECT_RATES, 75),
}

PROJECT_MANAGER_LIST = "tprojectManager"
PROJECT_MANAGER_RATE = 85
PROJECT_MANAGER_HOURS = 8

# Cost per unit
MATERIAL_UNIT_COSTS = {
    "Concrete Blocks": 2.50,
    "Lumber/Wood": 3.75,
    "Steel Beams": 125.00,
    "Bricks": 0.85,
    "Cement": 12.50,
    "Gravel/Aggregate": 45.00,
    "Rebar": 0.75,
    "Glass Panels": 8.50,
    "Insulation": 1.25,
    "Roofing Materials": 4.20,
    "Doors": 285.00,
    "Windows": 450.00,
    "Electrical Wire": 2.15,
    "PVC Pipes": 3.80,
    "Plumbing Fixtures": 325.00,
    "Paint": 35.00,
    "Nails/Screws": 0.08,
    "Drywall": 1.15,
    "Scaffolding": 15.00,
    "Safety Barriers": 25.00,
    "Lighting Fixtures": 125.00,
    "Electrical Panels": 850.00,
    "HVAC Components": 1250.00,
    "Flooring Materials": 6.50,
    "Mortar": 8.75,
    "Hardware/Fasteners": 0.15,
}
DEFAULT_MATERIAL_UNIT_COST = 10

# Rental per day
TOOL_DAILY_RATES = {
    "Hammer": 5.00,
    "Circular Saw": 15.00,
    "Wrench Set": 8.00,
    "Screwdriver Set": 6.00,
    "Measuring Tape": 3.00,
    "Level": 7.00,
    "Power Drill": 12.00,
    "Angle Grinder": 18.00,
    "Excavator": 350.00,
    "Dump Truck": 280.00,
    "Crane": 1200.00,
    "Bulldozer": 450.00,
    "Welding Machine": 45.00,
    "Plasma Cutter": 65.00,
    "Ladder": 10.00,
    "Scaffolding System": 25.00,
    "Air Compressor": 35.00,
    "Jackhammer": 55.00,
    "Concrete Mixer": 40.00,
    "Surveying Equipment": 85.00,
    "Safety Harness": 8.00,
    "Hard Hat": 2.00,
    "Safety Glasses": 1.50,
    "Work Gloves": 2.50,
    "Steel Toe Boots": 4.00,
    "Traffic Cones": 1.00,
    "Clipboard/Tablet": 15.00,
    "Construction Apps": 5.00,
    "Inspection Tools": 25.00,
    "Generator": 75.00,
}
DEFAULT_TOOL_DAILY_RATE = 20

# project type -> (multiplier, base cost)
PROJECT_TYPES = {
    "Residential Construction": (1.0, 5000),
    "Commercial Construction": (1.3, 8000),
    "Industrial Construction": (1.5, 12000),
    "Infrastructure Development": (1.7, 15000),
    "Renovation & Remodeling": (0.8, 3000),
    "Landscape Construction": (0.9, 4000),
    "Road Construction": (1.4, 10000),
    "Bridge Construction": (2.0, 25000),
    "Tunnel Construction": (2.5, 35000),
    "High-rise Building": (1.8, 18000),
    "Hospital Construction": (1.6, 14000),
    "School Construction": (1.2, 7000),
    "Airport Construction": (2.2, 30000),
    "Railway Construction": (1.9, 20000),
    "Water Treatment Plant": (1.7, 16000),
}

# project priority -> (multiplier, urgency fee)
PROJECT_PRIORITIES = {
    "Low": (0.9, 0),
    "Medium": (1.0, 500),
    "High": (1.2, 1500),
    "Critical": (1.5, 3000),
    "Emergency": (2.0, 5000),
}

PROFIT_MARGIN_RATE = 0.15


# ==================== Pricing ====================


def _items(entry: Mapping[str, Any], name: str) -> List[Mapping[str, Any]]:
    items = entry.get(name)
    if not isinstance(items, (list, tuple)):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def hourly_rate(list_field: str, role: Any) -> float:
    """
    Get hourly rate for a labor line.

    Args:
        list_field: Timeline labor list (tworker, tengineer, tarchitect)
        role: Worker role or engineer/architect specialty

    Returns:
        Rate from the table, or the default rate of that list
    """
    _, _, table, default = LABOR_RATE_TABLES[list_field]
    return table.get(role, default)


def price_labor(entry: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Price the labor lines of one timeline entry.

    Lines without a role/specialty or without hours are skipped.
    Each project manager listed is billed a standard working day.

    Returns:
        Dict with cost, hours and breakdown (one dict per priced line)
    """
    breakdown = []
    for list_field, (label, role_field, _, _) in LABOR_RATE_TABLES.items():
        for item in _items(entry, list_field):
            role = item.get(role_field)
            hours = to_number(item.get("hoursWorked"))
            if not role or not hours:
                continue
            rate = hourly_rate(list_field, role)
            breakdown.append({
                "type": label,
                "name": item.get("name") or "Unknown",
                "role": role,
                "hours": hours,
                "rate": rate,
                "cost": hours * rate,
            })

    for pm in _items(entry, PROJECT_MANAGER_LIST):
        if not pm.get("name"):
            continue
        breakdown.append({
            "type": "Project Manager",
            "name": pm["name"],
            "role": "Project Manager",
            "hours": PROJECT_MANAGER_HOURS,
            "rate": PROJECT_MANAGER_RATE,
            "cost": PROJECT_MANAGER_HOURS * PROJECT_MANAGER_RATE,
        })

    return {
        "cost": sum(line["cost"] for line in breakdown),
        "hours": sum(line["hours"] for line in breakdown),
        "breakdown": breakdown,
    }


def price_materials(entry: Mapping[str, Any]) -> float:
    """
    Price the material lines of one timeline entry.

    Known materials use the unit cost table. Others use the line's own
    cost when given, else the default unit cost.
    """
    total = 0.0
    for item in _items(entry, "tmaterials"):
        quantity = to_number(item.get("quantity"))
        if not item.get("name") or not quantity:
            continue
        if item["name"] in MATERIAL_UNIT_COSTS:
            total += quantity * MATERIAL_UNIT_COSTS[item["name"]]
        elif to_number(item.get("cost")):
            total += to_number(item.get("cost"))
        else:
            total += quantity * DEFAULT_MATERIAL_UNIT_COST
    return total


def price_tools(entry: Mapping[str, Any]) -> float:
    """Price the tool lines of one timeline entry (one rental day per unit)."""
    total = 0.0
    for item in _items(entry, "ttools"):
        quantity = to_number(item.get("quantity"))
        if not item.get("name") or not quantity:
            continue
        total += quantity * TOOL_DAILY_RATES.get(item["name"], DEFAULT_TOOL_DAILY_RATE)
    return total


def project_adjustment(project: Mapping[str, Any]) -> Tuple[float, float]:
    """
    Get fixed base cost and cost multiplier for a project.

    Base cost = type base cost + priority urgency fee. The multiplier is
    the product of the type and priority multipliers. Unknown types and
    priorities contribute nothing (multiplier 1, cost 0).

    Returns:
        (base_cost, multiplier)
    """
    base_cost = 0.0
    multiplier = 1.0

    if project.get("ptype") in PROJECT_TYPES:
        type_multiplier, type_cost = PROJECT_TYPES[project["ptype"]]
        base_cost += type_cost
        multiplier *= type_multiplier

    if project.get("ppriority") in PROJECT_PRIORITIES:
        priority_multiplier, urgency_fee = PROJECT_PRIORITIES[project["ppriority"]]
        base_cost += urgency_fee
        multiplier *= priority_multiplier

    return base_cost, multiplier


def price_timeline(entry: Mapping[str, Any], multiplier: float = 1.0) -> Dict[str, float]:
    """
    Price one timeline entry, with the project multiplier applied to every cost.

    Returns:
        Dict with labor, materials, tools, expenses, hours and daily_cost
    """
    labor = price_labor(entry)
    costs = {
        "labor": labor["cost"] * multiplier,
        "materials": price_materials(entry) * multiplier,
        "tools": price_tools(entry) * multiplier,
        "expenses": expense_total(entry) * multiplier,
    }
    costs["daily_cost"] = sum(costs.values())
    costs["hours"] = labor["hours"]
    return costs
