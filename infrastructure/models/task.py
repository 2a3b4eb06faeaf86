"""
任务数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from .base import Base


class TaskModel(Base):
    """
    任务数据库模型

    parent_list 只是普通列：不声明外键，删除列表不会级联删除任务
    """
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_parent_list", "parent_list"),
    )

    id_task = Column(String, primary_key=True, comment="任务ID")
    parent_list = Column(String, nullable=False, default="", comment="所属列表ID")

    title = Column(String, nullable=False, default="", comment="标题")
    body = Column(String, nullable=False, default="", comment="内容")

    completed_on = Column(DateTime(timezone=True), nullable=True, comment="完成时间")
    due_date = Column(DateTime(timezone=True), nullable=True, comment="截止日期")
    importance = Column(Integer, nullable=False, default=0, comment="重要程度")
    favorite = Column(Boolean, nullable=False, default=False, comment="是否收藏")
    is_reminder_on = Column(Boolean, nullable=False, default=False, comment="是否开启提醒")
    reminder_date = Column(DateTime(timezone=True), nullable=True, comment="提醒时间")
    status = Column(Integer, nullable=False, default=0, comment="状态")

    created_date_time = Column(DateTime(timezone=True), nullable=True, comment="创建时间")
    last_modified_date_time = Column(DateTime(timezone=True), nullable=True, comment="最后修改时间")

    def __repr__(self):
        return f"<TaskModel(id_task='{self.id_task}', parent_list='{self.parent_list}', title='{self.title}')>"
