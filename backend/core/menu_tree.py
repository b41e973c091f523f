"""
core/menu_tree.py - 菜单树构建与勾选传播

纯内存算法，不访问数据库：
- build_menu_tree: 扁平行 → 按 (sort, id) 排序的森林
- descendant_ids / ancestor_ids: 子孙与祖先收集
- check_node / uncheck_node / toggle_node: 勾选传播
- toggle_select_all: 全选 / 清空切换

节点之间只通过 id 引用，parent_id = 0 表示根。
"""
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

ROOT_ID = 0


@dataclass
class MenuNode:
    id: int
    parent_id: int = ROOT_ID
    menu_type: str = "M"
    menu_name: str = ""
    permission: Optional[str] = None
    path: Optional[str] = None
    component: Optional[str] = None
    icon: Optional[str] = None
    sort: int = 0
    visible: int = 1
    status: int = 1
    is_external: int = 0
    is_cache: int = 0
    remark: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    children: List["MenuNode"] = field(default_factory=list)

    @classmethod
    def from_row(cls, row) -> "MenuNode":
        """从任意带同名属性的对象（ORM 行、另一个 MenuNode）复制出无子节点的新节点"""
        values = {}
        for f in fields(cls):
            if f.name == "children":
                continue
            if hasattr(row, f.name):
                values[f.name] = getattr(row, f.name)
        if values.get("parent_id") is None:
            values["parent_id"] = ROOT_ID
        return cls(**values)


def _sort_key(node: MenuNode):
    return (node.sort or 0, node.id)


def iter_nodes(tree: Iterable[MenuNode]):
    """深度优先遍历森林中的所有节点"""
    stack = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def collect_ids(tree: Iterable[MenuNode]) -> Set[int]:
    return {node.id for node in iter_nodes(tree)}


def _cycle_members(node: MenuNode, by_id: Dict[int, MenuNode]) -> List[MenuNode]:
    """从不可达节点沿 parent_id 上行，返回遇到的环上的节点"""
    path: List[MenuNode] = []
    seen: Dict[int, int] = {}
    current = node
    while current.id not in seen:
        seen[current.id] = len(path)
        path.append(current)
        current = by_id[current.parent_id]
    return path[seen[current.id]:]


def build_menu_tree(rows: Iterable) -> List[MenuNode]:
    """扁平菜单行 → 森林

    每个输入行在结果中恰好出现一次：
    - parent_id 指向不存在的节点（孤儿）时提升为根
    - 每个环只断开一个节点（环上按 (sort, id) 最小者）提升为根，挂在环下的子树保持原位
    同级节点按 (sort, id) 升序。
    """
    by_id: Dict[int, MenuNode] = {}
    for row in rows:
        node = MenuNode.from_row(row)
        if node.id in by_id:
            logger.warning("菜单 id 重复，忽略后出现的行: %s", node.id)
            continue
        by_id[node.id] = node

    roots: List[MenuNode] = []
    for node in by_id.values():
        if node.parent_id == ROOT_ID:
            roots.append(node)
            continue
        parent = by_id.get(node.parent_id)
        if parent is None:
            logger.warning("菜单 %s 的父节点 %s 不存在，作为根节点处理", node.id, node.parent_id)
            roots.append(node)
        else:
            parent.children.append(node)

    reached = collect_ids(roots)
    if len(reached) < len(by_id):
        for node in sorted(by_id.values(), key=_sort_key):
            if node.id in reached:
                continue
            # 不可达节点的父链必然进入一个环
            member = min(_cycle_members(node, by_id), key=_sort_key)
            logger.warning("菜单 %s 处于环中，断开与父节点 %s 的关系", member.id, member.parent_id)
            by_id[member.parent_id].children.remove(member)
            roots.append(member)
            reached |= collect_ids([member])

    roots.sort(key=_sort_key)
    for node in iter_nodes(roots):
        node.children.sort(key=_sort_key)
    return roots


def find_node(tree: Iterable[MenuNode], node_id: int) -> Optional[MenuNode]:
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def descendant_ids(node: MenuNode) -> List[int]:
    """节点自身及全部子孙节点的 id"""
    return [n.id for n in iter_nodes([node])]


def build_parent_map(tree: Iterable[MenuNode]) -> Dict[int, int]:
    """child_id → parent_id，根节点不在映射中"""
    parent_map: Dict[int, int] = {}
    for node in iter_nodes(tree):
        for child in node.children:
            parent_map[child.id] = node.id
    return parent_map


def ancestor_ids(node_id: int, parent_map: Dict[int, int]) -> List[int]:
    """自底向上的祖先 id，不含节点自身"""
    ancestors: List[int] = []
    current = parent_map.get(node_id)
    while current is not None and current not in ancestors and current != node_id:
        ancestors.append(current)
        current = parent_map.get(current)
    return ancestors


def check_node(selected: Iterable[int], node: MenuNode, parent_map: Dict[int, int]) -> Set[int]:
    """勾选：加入节点、全部子孙和全部祖先"""
    result = set(selected)
    result.update(descendant_ids(node))
    result.update(ancestor_ids(node.id, parent_map))
    return result


def uncheck_node(selected: Iterable[int], node: MenuNode) -> Set[int]:
    """取消勾选：移除节点和全部子孙，祖先保持不变"""
    return set(selected) - set(descendant_ids(node))


def toggle_node(selected: Iterable[int], node: MenuNode, parent_map: Dict[int, int]) -> Set[int]:
    selected = set(selected)
    if node.id in selected:
        return uncheck_node(selected, node)
    return check_node(selected, node, parent_map)


def toggle_select_all(selected: Iterable[int], all_ids: Iterable[int]) -> Set[int]:
    """已选数量等于节点总数时清空，否则全选"""
    all_ids = set(all_ids)
    if len(set(selected)) == len(all_ids):
        return set()
    return all_ids
