"""
Morton (Z-order) code encoding and 32-bit reversal on integer tensors.

All functions work element-wise on int64 tensors holding non-negative values.
"""

import torch


def part1_by1(x: torch.Tensor) -> torch.Tensor:
    """Spread the low 16 bits of x by inserting one zero between each bit."""
    x = x & 0x0000ffff
    x = (x ^ (x << 8)) & 0x00ff00ff
    x = (x ^ (x << 4)) & 0x0f0f0f0f
    x = (x ^ (x << 2)) & 0x33333333
    x = (x ^ (x << 1)) & 0x55555555
    return x


def part1_by2(x: torch.Tensor) -> torch.Tensor:
    """Spread the low 10 bits of x by inserting two zeros between each bit."""
    x = x & 0x000003ff
    x = (x ^ (x << 16)) & 0xff0000ff
    x = (x ^ (x << 8)) & 0x0300f00f
    x = (x ^ (x << 4)) & 0x030c30c3
    x = (x ^ (x << 2)) & 0x09249249
    return x


def encode_morton(x: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
    """
    Interleave two 16-bit grid coordinates into a 32-bit Morton code.

    Bit 15 of y lands on bit 31 of the code, bit 15 of x on bit 30, and so on
    down to bit 0 of x on bit 0.
    """
    return (part1_by1(y) << 1) + part1_by1(x)


def encode_morton3(x: torch.Tensor, y: torch.Tensor, z: torch.Tensor) -> torch.Tensor:
    """Interleave three 10-bit grid coordinates into a 30-bit Morton code."""
    return (part1_by2(z) << 2) + (part1_by2(y) << 1) + part1_by2(x)


def reverse_bits32(index: torch.Tensor) -> torch.Tensor:
    """Reverse the bit order of 32-bit codes (bit 0 <-> bit 31, bit 1 <-> bit 30, ...)."""
    index = index & 0xffffffff
    index = ((index >> 1) & 0x55555555) | ((index & 0x55555555) << 1)
    index = ((index >> 2) & 0x33333333) | ((index & 0x33333333) << 2)
    index = ((index >> 4) & 0x0f0f0f0f) | ((index & 0x0f0f0f0f) << 4)
    index = ((index >> 8) & 0x00ff00ff) | ((index & 0x00ff00ff) << 8)
    index = ((index >> 16) & 0xffff) | ((index & 0xffff) << 16)
    return index
