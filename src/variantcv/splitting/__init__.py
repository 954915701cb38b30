"""Splitting utilities for cross-validation."""

from variantcv.splitting.folds import (
    FOLD_MODES,
    FoldMode,
    FoldPartitioner,
    assert_disjoint,
    fold_summary,
    for_fold,
    group_fold_ids,
    stratified_fold_ids,
)

__all__ = [
    "FOLD_MODES",
    "FoldMode",
    "FoldPartitioner",
    "assert_disjoint",
    "fold_summary",
    "for_fold",
    "group_fold_ids",
    "stratified_fold_ids",
]
