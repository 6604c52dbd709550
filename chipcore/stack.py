"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipcore.constants import ADDRESS_MASK, STACK_SIZE
from chipcore.state import StackState, Fault


def _fault(condition: jnp.ndarray, fault: Fault) -> jnp.ndarray:
    return jnp.where(condition, jnp.uint8(int(fault)), jnp.uint8(int(Fault.NONE)))


def push(stack: StackState, address: jnp.ndarray, policy: str = "strict") -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack.

    A full stack is left untouched under the "strict" policy and the returned
    fault is ``Fault.STACK_OVERFLOW``; under "wrap" the pointer wraps and the
    oldest entry is overwritten.
    """
    masked_address = jnp.astype(address, jnp.uint16) & ADDRESS_MASK
    if policy == "wrap":
        slot = stack.pointer % STACK_SIZE
        return stack.replace(
            data=stack.data.at[slot].set(masked_address),
            pointer=(slot + 1) % STACK_SIZE,
        ), _fault(False, Fault.NONE)

    full = stack.pointer >= STACK_SIZE
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    return stack.replace(
        data=jnp.where(full, stack.data, stack.data.at[slot].set(masked_address)),
        pointer=jnp.where(full, stack.pointer, stack.pointer + 1),
    ), _fault(full, Fault.STACK_OVERFLOW)


def pop(stack: StackState, policy: str = "strict") -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack.

    An empty stack under the "strict" policy is left untouched and the
    returned fault is ``Fault.STACK_UNDERFLOW``; the address is then
    meaningless.
    """
    if policy == "wrap":
        empty = jnp.asarray(False)
        new_pointer = (stack.pointer - 1) % STACK_SIZE
    else:
        empty = stack.pointer == 0
        new_pointer = jnp.where(empty, stack.pointer, stack.pointer - 1)

    popped_address = stack.data[new_pointer]
    new_data = jnp.where(empty, stack.data, stack.data.at[new_pointer].set(0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, _fault(empty, Fault.STACK_UNDERFLOW)
