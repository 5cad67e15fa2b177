class SingularMatrixError(ZeroDivisionError):
    """
    Raised when a matrix cannot be inverted or polar-decomposed because its
    determinant is numerically zero.
    """
