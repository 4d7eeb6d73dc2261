"""Declared output shapes for tool results.

Backend records are untyped mappings; these models are what they get projected
into. Field names are snake_case in Python and camelCase on the wire, which is
also the backend's field naming, so a projection copies same-named values.
Date fields keep whatever the backend sent: an ISO string or a numeric epoch.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DateValue = Union[str, int, float]


class Projection(BaseModel):
    """Base for all output shapes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ============================================================================
# DataManager
# ============================================================================

class DataManagerLog(Projection):
    log_id: str = Field(..., description="The log ID.")
    config_id: Optional[str] = None
    owner_party_id: Optional[str] = None
    upload_file_content_id: Optional[str] = None
    export_file_content_id: Optional[str] = None
    log_type_enum_id: Optional[str] = None
    created_by_user_login: Optional[str] = None
    created_date: Optional[DateValue] = None
    start_date_time: Optional[DateValue] = None
    finish_date_time: Optional[DateValue] = None
    cancel_date_time: Optional[DateValue] = None
    job_id: Optional[str] = None
    status_id: Optional[str] = None
    error_record_content_id: Optional[str] = None
    log_file_content_id: Optional[str] = None
    runtime_data_id: Optional[str] = None
    created_by_job_id: Optional[str] = None
    product_store_id: Optional[str] = None


class FailedLog(DataManagerLog):
    reason: Optional[str] = Field(default=None, description="Failure status; mirrors statusId")


class FailedLogList(Projection):
    logs: List[FailedLog] = Field(default_factory=list, description="List of failed logs.")


class DataManagerLogSummary(Projection):
    log_id: str
    config_id: Optional[str] = None
    status_id: Optional[str] = None
    job_id: Optional[str] = None
    created_date: Optional[DateValue] = None
    reason: Optional[str] = Field(default=None, description="Mirrors statusId; the backend has no reason field")


class DataManagerLogList(Projection):
    logs: List[DataManagerLogSummary] = Field(default_factory=list, description="List of found logs.")


class DataManagerConfig(Projection):
    config_id: str
    export_content_id: Optional[str] = None
    import_service_name: Optional[str] = None
    export_service_name: Optional[str] = None
    export_service_screen_name: Optional[str] = None
    export_service_screen_location: Optional[str] = None
    description: Optional[str] = None
    script_title: Optional[str] = None
    delimiter: Optional[str] = None
    file_name_pattern: Optional[str] = None
    execution_mode_id: Optional[str] = None
    multi_threading: Optional[str] = None
    import_path: Optional[str] = None
    export_path: Optional[str] = None
    priority: Optional[int] = None


class ImportConfigSummary(Projection):
    config_id: Optional[str] = None
    description: Optional[str] = None
    job_name: Optional[str] = None
    runtime_data_id: Optional[str] = None
    runtime_info: Optional[str] = Field(default=None, description="Runtime data of the config if available")


class RetryInstructions(Projection):
    message: str = Field(..., description="Result message or instructions.")
    can_retry: bool = Field(..., description="Whether automatic retry is possible.")


class UploadResult(Projection):
    config_id: str
    upload_file_content_id: Optional[str] = None
    status: str


# ============================================================================
# Orders
# ============================================================================

class OrderHeader(Projection):
    order_id: str
    status_id: Optional[str] = None
    external_id: Optional[str] = None
    entry_date: Optional[DateValue] = None
    product_store_id: Optional[str] = None
    grand_total: Optional[float] = None


class OrderItem(Projection):
    order_id: str
    order_item_seq_id: str
    product_id: Optional[str] = None
    item_description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    status_id: Optional[str] = None


class OrderItemList(Projection):
    items: List[OrderItem] = Field(default_factory=list, description="List of order items")


class OrderTask(Projection):
    work_effort_id: str
    work_effort_name: Optional[str] = None
    work_effort_type_id: Optional[str] = None
    current_status_id: Optional[str] = None
    description: Optional[str] = None
    created_date: Optional[str] = Field(default=None, description="ISO-8601 timestamp")


class OrderTaskList(Projection):
    tasks: List[OrderTask] = Field(default_factory=list)


# ============================================================================
# Catalog
# ============================================================================

class Product(Projection):
    product_id: str
    product_name: Optional[str] = None
    internal_name: Optional[str] = None
    description: Optional[str] = None
    product_type_id: Optional[str] = None
    is_virtual: Optional[str] = None
    is_variant: Optional[str] = None


class PickProfileGroup(Projection):
    pick_profile_group_id: str
    group_name: Optional[str] = None
    description: Optional[str] = None


class PickProfileGroupList(Projection):
    pick_profile_groups: List[PickProfileGroup] = Field(
        default_factory=list, description="List of found pick profile groups."
    )


# ============================================================================
# Content
# ============================================================================

class ResolvedContent(Projection):
    content_id: str
    data_resource_id: Optional[str] = None
    text_data: Optional[str] = None
    mime_type: Optional[str] = None
    saved_path: Optional[str] = None
