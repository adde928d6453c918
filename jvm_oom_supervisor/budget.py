################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import collections
import re

from .common.constants import CODE_CACHE_MIB
from .common.constants import COMPRESSED_CLASS_SPACE_MIB
from .common.constants import DEFAULT_STACK_KIB
from .common.constants import DEFAULT_THREAD_COUNT
from .common.constants import DIRECT_MEMORY_DIVISOR
from .common.constants import HEAP_PCT_INIT
from .common.constants import HEAP_PCT_MAX
from .common.constants import LOG
from .common.constants import METASPACE_DIVISOR
from .common.constants import RESERVE_PCT

# Bytes in one unit of each size suffix
size_multipliers = {
    'b': 1,
    'k': 1024,
    'm': 1024 * 1024,
    'g': 1024 * 1024 * 1024,
}

MemoryBudget = collections.namedtuple('MemoryBudget', [
    'total_mib',
    'metaspace_mib',
    'direct_mib',
    'code_cache_mib',
    'compressed_class_space_mib',
    'stack_reserve_mib',
    'reserve_mib',
    'heap_budget_mib',
    'init_heap_mib',
    'max_heap_mib',
])


class InsufficientMemoryError(ValueError):
    """Off-heap reservations plus the safety reserve do not fit in the limit."""


def convert_from_bytes(bytes_amount, size_to_convert):
    """Function that converts a value of bytes to other size value, truncating
    to a whole number of the requested size type.
    e.g.
        bytes_amount = 3.145.728
        size_to_convert = 'm'
        returns 3 (Which means that 3.145.728 bytes = 3 MiB)

    Parameters
    ----------
    bytes_amount : int
        Number of bytes
    size_to_convert : str
        Which size type should be converted to

    Returns
    -------
    int
        Converted amount of the size type requested
    """
    return bytes_amount // size_multipliers[size_to_convert]


def convert_to_bytes(amount, size_from_convert):
    """Function that converts a value of a size type to the equivalent byte amount
    e.g.
        amount = 3
        size_from_convert = 'm'
        returns 3.145.728 (Which means that 3 MiB = 3.145.728 bytes)
    """
    return amount * size_multipliers[size_from_convert]


def parse_size(string_size, default_unit='b'):
    """Function that parses a memory size such as "256", "256k" or "1g" and
    returns the equivalent amount of bytes. A value without a suffix is
    interpreted in default_unit.

    Parameters
    ----------
    string_size : str
        The string containing the size that will be parsed.
    default_unit : str
        Size type applied when the string has no suffix.

    Returns
    -------
    int
        Amount of bytes

    Raises
    ------
    ValueError
        When the string is not a valid size.
    """
    match = re.match(r'^\s*(\d+)\s*([bkmg]?)\s*$', str(string_size), re.IGNORECASE)
    if not match:
        raise ValueError(f'Invalid memory size: {string_size!r}')
    unit = match.group(2).lower() or default_unit
    return convert_to_bytes(int(match.group(1)), unit)


def compute_budget(total_bytes, thread_count=DEFAULT_THREAD_COUNT,
                   stack_kib=DEFAULT_STACK_KIB):
    """Function that partitions the container memory limit into a JVM heap
    budget and fixed off-heap reservations.

    Metaspace and direct memory get 1/8 of the limit each, the code cache and
    the compressed class space have fixed caps, thread stacks are reserved for
    thread_count threads of stack_kib each and a safety reserve is kept out of
    the heap. The initial and maximum heap are fixed fractions of what is left.
    All arithmetic is integer floor division so the result is deterministic.

    Parameters
    ----------
    total_bytes : int
        Container memory limit in bytes
    thread_count : int
        Expected number of JVM threads
    stack_kib : int
        Stack size per thread in KiB

    Returns
    -------
    MemoryBudget
        The full budget breakdown, in MiB

    Raises
    ------
    InsufficientMemoryError
        When the heap budget would be zero or negative.
    """
    total_mib = convert_from_bytes(total_bytes, 'm')
    metaspace_mib = total_mib // METASPACE_DIVISOR
    direct_mib = total_mib // DIRECT_MEMORY_DIVISOR
    stack_reserve_mib = thread_count * stack_kib // 1024
    reserve_mib = total_mib * RESERVE_PCT // 100
    off_heap_mib = (metaspace_mib + direct_mib + CODE_CACHE_MIB +
                    COMPRESSED_CLASS_SPACE_MIB + stack_reserve_mib)
    heap_budget_mib = total_mib - off_heap_mib - reserve_mib

    LOG.info(f'Container RAM: {total_mib} MiB | Off-heap caps: Metaspace={metaspace_mib}m, '
             f'Direct={direct_mib}m, CodeCache={CODE_CACHE_MIB}m, '
             f'CCSpace={COMPRESSED_CLASS_SPACE_MIB}m, '
             f'ThreadStacks={stack_reserve_mib}m ({thread_count} x {stack_kib}k) | '
             f'Reserve={reserve_mib}m | Heap budget={heap_budget_mib}m')

    if heap_budget_mib <= 0:
        raise InsufficientMemoryError(
            f'Off-heap reservations ({off_heap_mib} MiB) plus reserve ({reserve_mib} MiB) '
            f'exceed the container limit of {total_mib} MiB')

    budget = MemoryBudget(
        total_mib=total_mib,
        metaspace_mib=metaspace_mib,
        direct_mib=direct_mib,
        code_cache_mib=CODE_CACHE_MIB,
        compressed_class_space_mib=COMPRESSED_CLASS_SPACE_MIB,
        stack_reserve_mib=stack_reserve_mib,
        reserve_mib=reserve_mib,
        heap_budget_mib=heap_budget_mib,
        init_heap_mib=heap_budget_mib * HEAP_PCT_INIT // 100,
        max_heap_mib=heap_budget_mib * HEAP_PCT_MAX // 100,
    )
    LOG.info(f'JVM heap: Xms={budget.init_heap_mib}m, Xmx={budget.max_heap_mib}m')
    return budget
