"""
core - 与业务无关的通用算法

- menu_tree: 菜单树构建与勾选传播（纯内存，无数据库依赖）

使用方式:
    >>> from core.menu_tree import build_menu_tree, toggle_node
"""
