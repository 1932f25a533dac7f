# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the record-oriented table backend.

These constants define the query-parameter names, response keys and header
names used on the wire, plus the identifiers of the CRM tables the dashboard
binds by default.
"""

DEFAULT_API_URL = "https://api.airtable.com/v0/"

# Query parameters accepted by the list endpoint
PARAM_FILTER_BY_FORMULA = "filterByFormula"
PARAM_SORT = "sort"
PARAM_MAX_RECORDS = "maxRecords"
PARAM_PAGE_SIZE = "pageSize"
PARAM_OFFSET = "offset"
PARAM_VIEW = "view"

# Response body keys
RESPONSE_RECORDS = "records"
RESPONSE_OFFSET = "offset"

# Record wire keys
RECORD_ID = "id"
RECORD_FIELDS = "fields"
RECORD_CREATED_TIME = "createdTime"

# Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
DEFAULT_TENANT_HEADER = "X-Tenant-ID"

# CRM tables bound by the dashboard
TABLE_OPPORTUNITIES = "Opportunities"
TABLE_META_LEADS = "Meta_Leads"
TABLE_CONTENT = "ThoughtFlow___Content"
TABLE_ACTIVITY_LOG = "Activity_Log"
TABLE_EMPLOYEES = "Employees"
TABLE_PIPELINE_STAGES = "Pipeline_Stages"

CRM_TABLES = (
    TABLE_OPPORTUNITIES,
    TABLE_META_LEADS,
    TABLE_CONTENT,
    TABLE_ACTIVITY_LOG,
    TABLE_EMPLOYEES,
    TABLE_PIPELINE_STAGES,
)
