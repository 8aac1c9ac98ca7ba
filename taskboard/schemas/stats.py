from pydantic import BaseModel


class ProjectStats(BaseModel):
    status_stats: dict[str, int]
    type_stats: dict[str, int]
    priority_stats: dict[str, int]
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    completion_rate: float


class DashboardStats(BaseModel):
    project_count: int
    total_tasks: int
    completed: int
    in_progress: int
    overdue: int
    completion_rate: float
    status_stats: dict[str, int]
    type_stats: dict[str, int]
    priority_stats: dict[str, int]
