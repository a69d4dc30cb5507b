# services/listing_query.py
"""
俱乐部列表的搜索 / 筛选 / 排序 / 分页。

路由层只负责把 query string 解析成 ListingQuery，然后调用
search_listings(store, query)；store 是显式传入的存储能力：

    store.count(listing_filter) -> int
    store.find(listing_filter, sort, skip, limit) -> list

生产环境用 SqlListingStore（SQLAlchemy），测试里可以换成内存实现。

页码 / 每页条数的容错规则：
- 缺省或空字符串 -> page=1, limit=9
- page 非数字、非整数或 < 1 -> 按 1 处理
- limit 非数字、非整数或 < 1 -> 返回空页（data=[]，total 照常统计，totalPages=0）
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 9

# 关键词在这三个字段里做不区分大小写的子串匹配（OR）
SEARCH_FIELDS = ("club_name", "university_name", "university_country")
CATEGORY_FIELD = "category"
# sortBy 取值 -> 排序字段；其他取值一律不排序
SORT_FIELDS = {
    "fees": "application_fees",
    "date": "posted_date",
}

_LIKE_ESCAPE = "\\"
# SQLite / 多数 SQL 库的 LIMIT、OFFSET 都是有符号 64 位整数
MAX_ROWS = 2 ** 63 - 1


class ListingValidationError(ValueError):
    """参数不在可识别范围内（仅 strict 解析时抛出）。"""


class ListingStoreError(RuntimeError):
    """存储层执行 count / find 失败。"""


def _parse_int(raw: Any, default: int) -> Optional[int]:
    """
    把 query string 里的数字转成 int：
    - None / 空字符串 -> default
    - "3"、"3.0" -> 3
    - "abc"、"2.5"、"nan"、"inf" -> None（交给调用方决定怎么降级）
    """
    if raw is None:
        return default
    if isinstance(raw, str):
        raw = raw.strip()
        if raw == "":
            return default
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num) or not num.is_integer():
        return None
    return int(num)


@dataclass(frozen=True)
class ListingQuery:
    search: Optional[str] = None
    category: Optional[str] = None
    sort_by: Optional[str] = None
    order: Optional[str] = None
    page: Optional[int] = DEFAULT_PAGE
    limit: Optional[int] = DEFAULT_LIMIT

    @classmethod
    def from_args(cls, args: Mapping[str, Any], strict: bool = False) -> "ListingQuery":
        """
        从 request.args 构造查询。
        默认宽松模式：非法值保留为 None / 原值，由 effective_page / effective_limit 降级，
        GET /clubs 走的就是这条路。
        strict=True 给需要直接拒绝的调用方（脚本、后台任务），page/limit 非法时抛
        ListingValidationError，路由层可以映射成 400。
        """
        page = _parse_int(args.get("page"), DEFAULT_PAGE)
        limit = _parse_int(args.get("limit"), DEFAULT_LIMIT)
        if strict:
            if page is None or page < 1:
                raise ListingValidationError(f"invalid page: {args.get('page')!r}")
            if limit is None or limit < 1:
                raise ListingValidationError(f"invalid limit: {args.get('limit')!r}")
        return cls(
            search=args.get("search") or None,
            category=args.get("category") or None,
            sort_by=args.get("sortBy") or None,
            order=args.get("order") or None,
            page=page,
            limit=limit,
        )

    @property
    def effective_page(self) -> int:
        if self.page is None or self.page < 1:
            return DEFAULT_PAGE
        return self.page

    @property
    def effective_limit(self) -> Optional[int]:
        """None 表示每页条数不可用，结果为空页。"""
        if self.limit is None or self.limit < 1:
            return None
        return self.limit


@dataclass(frozen=True)
class ListingFilter:
    search: Optional[str] = None
    category: Optional[str] = None

    def matches(self, listing: Any) -> bool:
        """
        内存判定，语义与 clauses() 生成的 SQL 一致（SQLite 上 lower() 已换成
        Python 的 str.lower，见 extensions.py）。
        给不走 SQL 的 store 用，例如测试里的内存实现。
        """
        if self.search:
            needle = self.search.lower()
            hit = any(
                needle in str(getattr(listing, f, None) or "").lower()
                for f in SEARCH_FIELDS
            )
            if not hit:
                return False
        if self.category:
            if getattr(listing, CATEGORY_FIELD, None) != self.category:
                return False
        return True

    def clauses(self, model) -> list:
        """生成 SQLAlchemy where 子句列表（多个子句之间是 AND）。"""
        out = []
        if self.search:
            like = f"%{_escape_like(self.search)}%"
            out.append(or_(*[
                getattr(model, f).ilike(like, escape=_LIKE_ESCAPE) for f in SEARCH_FIELDS
            ]))
        if self.category:
            out.append(getattr(model, CATEGORY_FIELD) == self.category)
        return out


@dataclass(frozen=True)
class ListingSort:
    field: str
    descending: bool = True

    def clause(self, model):
        col = getattr(model, self.field)
        return col.desc() if self.descending else col.asc()


@dataclass
class Page:
    data: List[Any] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    total_pages: int = 0

    def to_dict(self, serialize: Callable[[Any], Dict[str, Any]] = lambda x: x) -> Dict[str, Any]:
        return {
            "data": [serialize(x) for x in self.data],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
        }


def _escape_like(s: str) -> str:
    return (
        s.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_filter(query: ListingQuery) -> ListingFilter:
    return ListingFilter(search=query.search or None, category=query.category or None)


def build_sort(query: ListingQuery) -> Optional[ListingSort]:
    """
    sortBy=fees -> 报名费，sortBy=date -> 发布日期，其他值 / 缺省 -> None（不排序）。
    order 只有 "asc" 是升序，其余（包括缺省和乱填）一律降序。
    """
    field_name = SORT_FIELDS.get(query.sort_by or "")
    if field_name is None:
        return None
    return ListingSort(field=field_name, descending=query.order != "asc")


def paginate(store, listing_filter: ListingFilter, sort: Optional[ListingSort],
             page: int, limit: Optional[int]) -> Page:
    total = store.count(listing_filter)
    if limit is None:
        return Page(data=[], total=total, page=page, total_pages=0)

    skip = (page - 1) * limit
    if skip > MAX_ROWS:
        # 页码远超数据量，store 的 OFFSET 也放不下，直接是空页
        items = []
    else:
        items = store.find(listing_filter, sort, skip, min(limit, MAX_ROWS))
    return Page(
        data=list(items),
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def search_listings(store, query: ListingQuery) -> Page:
    logger.debug("listing query: %s", query)
    return paginate(
        store,
        build_filter(query),
        build_sort(query),
        query.effective_page,
        query.effective_limit,
    )


class SqlListingStore:
    """基于 SQLAlchemy session 的俱乐部存储。"""

    def __init__(self, session, model=None):
        if model is None:
            from models.club import Club
            model = Club
        self.session = session
        self.model = model

    def _base(self, listing_filter: ListingFilter):
        return self.session.query(self.model).filter(*listing_filter.clauses(self.model))

    def count(self, listing_filter: ListingFilter) -> int:
        try:
            return self._base(listing_filter).count()
        except SQLAlchemyError as e:
            raise ListingStoreError(f"count failed: {e}") from e

    def find(self, listing_filter: ListingFilter, sort: Optional[ListingSort],
             skip: int, limit: int) -> Sequence[Any]:
        q = self._base(listing_filter)
        if sort is not None:
            q = q.order_by(sort.clause(self.model))
        try:
            return q.offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            raise ListingStoreError(f"find failed: {e}") from e
