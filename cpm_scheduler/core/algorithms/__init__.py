from cpm_scheduler.core.algorithms.calendar import (
    WorkCalendar,
    add_working_days,
    is_working_day,
    subtract_working_days,
    working_days_between,
)
from cpm_scheduler.core.algorithms.critical_path import calculate_critical_path, calculate_slack
from cpm_scheduler.core.algorithms.network_model import backward_pass, forward_pass, topological_sort
from cpm_scheduler.core.algorithms.resource_allocation import (
    calculate_duration_with_time_off,
    calculate_effective_duration,
    calculate_with_resources,
)
