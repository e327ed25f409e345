"""ChainLinker - 取引をまたいで教育明細をラーニングパスにまとめる

同じ生徒・同じ分野（楽器・科目）の明細を、購入時期が違っても1本のチェーンとして扱う。
先生（提供者）はキーに含めないので、先生が変わっても同じチェーンに入る。

チェーンキー:
- 基本: "<生徒名>|<分野>"（小文字・前後空白除去）
- 分野が無い場合: "<生徒名>|@<店舗名>"
- 生徒名が無い場合: チェーン対象外

キーの判定は差し替え可能（key_func）。将来、人物テーブルで同一性を解決する場合も
呼び出し側の変更だけで済む。
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import date

from lessonpath.domain.models import (
    Chain,
    ChainEntry,
    LineItem,
    Transaction,
    TransactionWithItems,
)
from lessonpath.services.descriptor_parser import parse_iso_date

logger = logging.getLogger(__name__)

ChainKeyFunction = Callable[[LineItem, Transaction], "str | None"]

_MERCHANT_MARKER = "@"


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def chain_key(
    student_name: str | None, focus: str | None, merchant: str | None = None
) -> str | None:
    """生徒名・分野（無ければ店舗名）からチェーンキーを生成。作れなければ None"""
    student = _normalize(student_name)
    if not student:
        return None
    normalized_focus = _normalize(focus)
    if normalized_focus:
        return f"{student}|{normalized_focus}"
    normalized_merchant = _normalize(merchant)
    if normalized_merchant:
        return f"{student}|{_MERCHANT_MARKER}{normalized_merchant}"
    return None


def default_chain_key(item: LineItem, transaction: Transaction) -> str | None:
    """既定のキー関数（文字列一致による同一性判定）"""
    edu = item.education
    return chain_key(edu.student_name, edu.focus, transaction.merchant)


def extract_provider(item: LineItem, transaction: Transaction) -> str:
    """提供者名（先生 → 店舗名の順）"""
    return item.education.teacher_name or transaction.merchant or "Unknown Provider"


def effective_start_date(item: LineItem, transaction: Transaction) -> date | None:
    """明細の開始日。無ければ取引日"""
    return parse_iso_date(item.education.start_date) or parse_iso_date(
        transaction.transaction_date
    )


def _sort_key(entry: ChainEntry) -> tuple:
    # 日付不明のエントリは末尾。同日は明細IDで安定させる
    return (entry.start_date is None, entry.start_date or date.min, entry.item.id)


def build_chains(
    transactions: Iterable[TransactionWithItems],
    *,
    key_func: ChainKeyFunction = default_chain_key,
) -> list[Chain]:
    """
    全取引から教育チェーンを構築。

    Args:
        transactions: 明細つき取引
        key_func: 同一チェーン判定に使うキー関数

    Returns:
        list[Chain]: 各チェーンのエントリは開始日昇順
    """
    entries_by_key: dict[str, list[ChainEntry]] = defaultdict(list)
    providers_by_key: dict[str, list[str]] = defaultdict(list)
    first_item_by_key: dict[str, LineItem] = {}

    for record in transactions:
        transaction = record.transaction
        for item in record.items:
            if not item.is_education:
                continue
            key = key_func(item, transaction)
            if not key:
                continue

            first_item_by_key.setdefault(key, item)
            provider = extract_provider(item, transaction)
            if provider not in providers_by_key[key]:
                providers_by_key[key].append(provider)

            entries_by_key[key].append(
                ChainEntry(
                    item=item,
                    receipt=transaction,
                    start_date=effective_start_date(item, transaction),
                    end_date=parse_iso_date(item.education.end_date),
                )
            )

    chains = []
    for key, entries in entries_by_key.items():
        first = first_item_by_key[key]
        chains.append(
            Chain(
                chain_key=key,
                entries=sorted(entries, key=_sort_key),
                student_name=first.education.student_name,
                focus=first.education.focus,
                providers=providers_by_key[key],
            )
        )

    _warn_ambiguous_identity(chains)
    logger.debug("Built %d education chains", len(chains))
    return chains


def _warn_ambiguous_identity(chains: list[Chain]) -> None:
    """
    分野なし（店舗名キー）のチェーンと、同じ生徒・同じ店舗の分野ありチェーンが
    併存する場合は警告する。グルーピング自体は変えない。
    """
    focused: dict[tuple[str, str], list[str]] = defaultdict(list)
    by_merchant: list[tuple[Chain, str, str]] = []
    for chain in chains:
        # 独自の key_func が生成したキーは対象外
        student, sep, rest = chain.chain_key.partition("|")
        if not sep:
            continue
        if rest.startswith(_MERCHANT_MARKER):
            by_merchant.append((chain, student, rest[len(_MERCHANT_MARKER):]))
            continue
        for entry in chain.entries:
            pair = (student, _normalize(entry.receipt.merchant))
            if chain.chain_key not in focused[pair]:
                focused[pair].append(chain.chain_key)

    for chain, student, merchant in by_merchant:
        candidates = focused.get((student, merchant), [])
        if candidates:
            logger.warning(
                "AmbiguousChainIdentity: chain %s may belong to %s",
                chain.chain_key,
                ", ".join(candidates),
            )


def find_chain_for_item(
    item_id: str,
    transactions: Iterable[TransactionWithItems],
    *,
    key_func: ChainKeyFunction = default_chain_key,
) -> Chain | None:
    """
    明細を含むチェーンを返す。

    教育カテゴリでない、キーが作れない、同じキーの明細が他に無い場合は None。
    """
    for chain in build_chains(transactions, key_func=key_func):
        if len(chain.entries) < 2:
            continue
        if any(entry.item.id == item_id for entry in chain.entries):
            return chain
    return None


def get_chain_index(item_id: str, chain: Chain) -> int:
    """チェーン内の位置。見つからなければ -1"""
    for index, entry in enumerate(chain.entries):
        if entry.item.id == item_id:
            return index
    return -1
