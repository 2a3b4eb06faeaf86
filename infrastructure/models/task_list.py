"""
任务列表数据库模型
"""
from sqlalchemy import Boolean, Column, String

from .base import Base


class TaskListModel(Base):
    """任务列表数据库模型"""
    __tablename__ = "lists"

    id_list = Column(String, primary_key=True, comment="列表ID")
    name = Column(String, nullable=False, default="", comment="显示名称")
    is_owner = Column(Boolean, nullable=False, default=False, comment="是否为所有者")
    icon_name = Column(String, nullable=True, comment="图标")
    provider = Column(String, nullable=False, default="", comment="创建该列表的提供方")

    def __repr__(self):
        return f"<TaskListModel(id_list='{self.id_list}', name='{self.name}')>"
