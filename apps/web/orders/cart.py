"""
Cart editing helpers.

Carts are plain lists of immutable CartLine records. Every helper returns a
new list; lines and add-ons whose quantity would drop to zero are removed
rather than kept with quantity 0.
"""

from storefront_schemas import CartAddOn, CartEdit, CartEditAction, CartLine


def _replace(lines: list[CartLine], index: int, line: CartLine | None) -> list[CartLine]:
    updated = list(lines)
    if line is None:
        del updated[index]
    else:
        updated[index] = line
    return updated


def set_line_quantity(lines: list[CartLine], index: int, quantity: int) -> list[CartLine]:
    """Set a line's quantity; zero or less removes the line."""
    if quantity <= 0:
        return _replace(lines, index, None)
    return _replace(lines, index, lines[index].model_copy(update={"quantity": quantity}))


def increment_line(lines: list[CartLine], index: int) -> list[CartLine]:
    """Add one serving to a line."""
    return set_line_quantity(lines, index, lines[index].quantity + 1)


def decrement_line(lines: list[CartLine], index: int) -> list[CartLine]:
    """Remove one serving; decrementing a quantity-1 line removes it."""
    return set_line_quantity(lines, index, lines[index].quantity - 1)


def set_add_on_quantity(line: CartLine, add_on: CartAddOn, quantity: int) -> CartLine:
    """
    Set the per-serving quantity of an add-on on a line.

    An add-on not yet on the line is appended; a quantity of zero or less
    removes it from the selection entirely.
    """
    add_ons = list(line.selected_add_ons)
    position = next(
        (i for i, existing in enumerate(add_ons) if existing.add_on_id == add_on.add_on_id),
        None,
    )

    if quantity <= 0:
        if position is not None:
            del add_ons[position]
    elif position is not None:
        add_ons[position] = add_ons[position].model_copy(update={"quantity": quantity})
    else:
        add_ons.append(add_on.model_copy(update={"quantity": quantity}))

    return line.model_copy(update={"selected_add_ons": tuple(add_ons)})


def remove_add_on(line: CartLine, add_on_id: str) -> CartLine:
    """Drop an add-on from a line's selection."""
    add_ons = tuple(a for a in line.selected_add_ons if a.add_on_id != add_on_id)
    return line.model_copy(update={"selected_add_ons": add_ons})


def apply_edit(lines: list[CartLine], edit: CartEdit) -> list[CartLine]:
    """
    Apply one CartEdit to a cart.

    Raises:
        IndexError: If ``edit.index`` does not address a line.
    """
    if edit.index >= len(lines):
        raise IndexError(f"Cart has no line {edit.index}")

    match edit.action:
        case CartEditAction.SET_QUANTITY:
            return set_line_quantity(lines, edit.index, edit.quantity or 0)
        case CartEditAction.INCREMENT:
            return increment_line(lines, edit.index)
        case CartEditAction.DECREMENT:
            return decrement_line(lines, edit.index)
        case CartEditAction.SET_ADD_ON:
            line = set_add_on_quantity(
                lines[edit.index],
                edit.add_on,  # type: ignore[arg-type]
                edit.quantity or 0,
            )
            return _replace(lines, edit.index, line)
        case CartEditAction.REMOVE_ADD_ON:
            line = remove_add_on(lines[edit.index], edit.add_on_id or "")
            return _replace(lines, edit.index, line)
