''' Author: Lucas Rath
'''

import numpy as np
import scipy as sp
import scipy.linalg

from covprior.utils.exceptions import DecompositionFailure


class Cholesky():
    ''' Cholesky factorization A = L @ L.T of a symmetric positive definite matrix.

    Only the lower triangle of `A` is read. Non-finite entries are not checked and
    propagate into the factor.

    Raises:
        DecompositionFailure: if `A` is not square or not positive definite
    '''
    def __init__(self, A:np.ndarray):
        A = np.asarray(A, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise DecompositionFailure(f'expecting a square matrix, got shape {A.shape}')
        try:
            self.L = sp.linalg.cholesky(A, lower=True, check_finite=False)
        except np.linalg.LinAlgError as e:
            raise DecompositionFailure(f'matrix is not positive definite: {e}') from e

    def __len__(self):
        return len(self.L)

    @property
    def factor(self) -> np.ndarray:
        ''' lower triangular factor L '''
        return self.L

    @property
    def determinant(self) -> float:
        return np.prod(np.diag(self.L)) ** 2

    @property
    def log_determinant(self) -> float:
        return 2. * np.sum(np.log(np.diag(self.L)))

    def solve(self, B:np.ndarray) -> np.ndarray:
        ''' Returns X = A^-1 @ B using two triangular solves '''
        return sp.linalg.cho_solve((self.L, True), np.asarray(B, dtype=float), check_finite=False)

    def inverse(self) -> np.ndarray:
        ''' A^-1, symmetrized to remove round-off asymmetry of the triangular solves '''
        Ainv = self.solve(np.eye(len(self)))
        return 0.5 * Ainv + 0.5 * Ainv.T
