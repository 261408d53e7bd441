"""
Per-domain record schemas.

Each schema names the fields the pipeline reads, their types, the
fields searched by free-text queries, defaults for missing values and
derived fields. Anything not listed is carried through opaquely.
"""

from typing import Dict

from .exceptions import NotFoundError
from .models import DomainSchema, FieldType
from .rules import (
    age_bracket,
    complaint_type,
    inspection_outcome,
    inspection_score,
    stock_status,
    timeline_totals,
)

T = FieldType


MATERIAL_SCHEMA = DomainSchema(
    name="materials",
    fields={
        "name": T.TEXT,
        "category": T.TEXT,
        "unit": T.TEXT,
        "quantity": T.NUMBER,
        "minStock": T.NUMBER,
        "avgUnitCost": T.MONEY,
        "lastUnitCost": T.MONEY,
        "supplierPrices": T.LIST,
        "createdAt": T.DATE,
        "updatedAt": T.DATE,
    },
    search_fields=("name", "category", "unit"),
    defaults={"category": "General", "unit": "kg"},
    derived={"stockStatus": stock_status},
)

COST_ROW_SCHEMA = DomainSchema(
    name="cost_per_unit",
    fields={
        "name": T.TEXT,
        "unit": T.TEXT,
        "quantity": T.NUMBER,
        "minStock": T.NUMBER,
        "avgUnitCost": T.MONEY,
        "lastUnitCost": T.MONEY,
        "bestSupplierName": T.TEXT,
        "bestSupplierPrice": T.MONEY,
        "gap": T.MONEY,
        "lowStock": T.BOOL,
    },
    search_fields=("name", "unit", "bestSupplierName"),
    derived={"stockStatus": lambda row: "Low" if row.get("lowStock") else "OK"},
)

SUPPLIER_SCHEMA = DomainSchema(
    name="suppliers",
    fields={
        "name": T.TEXT,
        "email": T.TEXT,
        "phone": T.TEXT,
        "address": T.TEXT,
        "rating": T.NUMBER,
        "materialsOffered": T.LIST,
        "notes": T.TEXT,
        "createdAt": T.DATE,
    },
    search_fields=("name", "email", "phone", "address"),
    defaults={"rating": 0},
)

TOOL_SCHEMA = DomainSchema(
    name="tools",
    fields={
        "model": T.TEXT,
        "serial": T.TEXT,
        "purchaseDate": T.DATE,
        "status": T.TEXT,
        "depreciationRate": T.NUMBER,
        "usageHours": T.NUMBER,
        "price": T.MONEY,
        "createdAt": T.DATE,
    },
    search_fields=("model", "serial", "status"),
    defaults={"status": "available"},
)

RENTAL_SCHEMA = DomainSchema(
    name="rentals",
    fields={
        "toolId": T.TEXT,
        "userId": T.TEXT,
        "rentalStartDate": T.DATE,
        "rentalEndDate": T.DATE,
        "actualReturnDate": T.DATE,
        "status": T.TEXT,
        "notes": T.TEXT,
        "totalPrice": T.MONEY,
    },
    search_fields=("toolId", "userId", "status", "notes"),
    defaults={"status": "rented"},
)

USER_SCHEMA = DomainSchema(
    name="users",
    fields={
        "name": T.TEXT,
        "email": T.TEXT,
        "employeeId": T.TEXT,
        "address": T.TEXT,
        "phoneNumber": T.TEXT,
        "age": T.NUMBER,
        "status": T.TEXT,
        "department": T.TEXT,
        "createdAt": T.DATE,
    },
    search_fields=("name", "email", "employeeId", "address"),
    defaults={"status": "Active", "department": "General"},
    derived={"ageGroup": lambda user: age_bracket(user.get("age"))},
)

PROJECT_REQUEST_SCHEMA = DomainSchema(
    name="project_requests",
    fields={
        "preqname": T.TEXT,
        "preqmail": T.TEXT,
        "preqnumber": T.TEXT,
        "preqdescription": T.TEXT,
        "preqdate": T.DATE,
    },
    search_fields=("preqname", "preqmail", "preqnumber", "preqdescription"),
)

PROJECT_SCHEMA = DomainSchema(
    name="projects",
    fields={
        "pname": T.TEXT,
        "pcode": T.TEXT,
        "pownerid": T.TEXT,
        "pownername": T.TEXT,
        "pdescription": T.TEXT,
        "plocation": T.TEXT,
        "pobservations": T.TEXT,
        "pbudget": T.MONEY,
        "pstatus": T.TEXT,
        "ptype": T.TEXT,
        "ppriority": T.TEXT,
        "pcreatedat": T.DATE,
        "penddate": T.DATE,
    },
    search_fields=("pname", "plocation", "pdescription", "pobservations"),
)

TIMELINE_SCHEMA = DomainSchema(
    name="timelines",
    fields={
        "date": T.DATE,
        "pcode": T.TEXT,
        "tworker": T.LIST,
        "tengineer": T.LIST,
        "tarchitect": T.LIST,
        "texpenses": T.LIST,
        "tmaterials": T.LIST,
        "ttools": T.LIST,
        "tprojectManager": T.LIST,
        "tnotes": T.TEXT,
        "totalHours": T.NUMBER,
        "totalCost": T.MONEY,
    },
    search_fields=("pcode", "tnotes"),
    derived={
        "totalHours": lambda entry: timeline_totals(entry)["hours"],
        "totalCost": lambda entry: timeline_totals(entry)["cost"],
    },
)

FINANCIAL_ROW_SCHEMA = DomainSchema(
    name="financials",
    fields={
        "projectCode": T.TEXT,
        "projectName": T.TEXT,
        "projectType": T.TEXT,
        "projectPriority": T.TEXT,
        "timelineEntries": T.NUMBER,
        "laborHours": T.NUMBER,
        "baseCost": T.MONEY,
        "laborCost": T.MONEY,
        "materialCost": T.MONEY,
        "toolCost": T.MONEY,
        "expenses": T.MONEY,
        "totalCost": T.MONEY,
        "workerCount": T.NUMBER,
        "engineerCount": T.NUMBER,
        "architectCount": T.NUMBER,
        "pmCount": T.NUMBER,
    },
    search_fields=("projectCode", "projectName", "projectType"),
    id_field="projectCode",
)

INSPECTION_SCHEMA = DomainSchema(
    name="inspections",
    fields={
        "project": T.TEXT,
        "area": T.TEXT,
        "inspector": T.TEXT,
        "dueAt": T.DATE,
        "status": T.TEXT,
        "outcome": T.TEXT,
        "score": T.NUMBER,
        "notes": T.TEXT,
        "createdBy": T.TEXT,
    },
    search_fields=("project", "area", "inspector", "notes"),
    defaults={"status": "UPCOMING"},
    derived={
        "outcome": lambda inspection: inspection_outcome(inspection) or "",
        "score": inspection_score,
    },
)

COMPLAINT_SCHEMA = DomainSchema(
    name="complaints",
    fields={
        "ticket": T.TEXT,
        "area": T.TEXT,
        "type": T.TEXT,
        "complainant": T.TEXT,
        "description": T.TEXT,
        "status": T.TEXT,
        "assignee": T.TEXT,
        "escalated": T.BOOL,
        "createdAt": T.DATE,
        "updatedAt": T.DATE,
    },
    search_fields=("ticket", "area", "complainant", "description", "assignee"),
    defaults={"status": "OPEN", "assignee": "Manager"},
    derived={"type": complaint_type},
)


SCHEMAS: Dict[str, DomainSchema] = {
    schema.name: schema
    for schema in (
        MATERIAL_SCHEMA,
        COST_ROW_SCHEMA,
        SUPPLIER_SCHEMA,
        TOOL_SCHEMA,
        RENTAL_SCHEMA,
        USER_SCHEMA,
        PROJECT_REQUEST_SCHEMA,
        PROJECT_SCHEMA,
        TIMELINE_SCHEMA,
        FINANCIAL_ROW_SCHEMA,
        INSPECTION_SCHEMA,
        COMPLAINT_SCHEMA,
    )
}


def get_schema(kind: str) -> DomainSchema:
    """
    Get schema for a record kind.

    Raises:
        NotFoundError: If kind is unknown
    """
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise NotFoundError(
            f"Unknown record kind: {kind}",
            details={"allowed": sorted(SCHEMAS)},
        )
