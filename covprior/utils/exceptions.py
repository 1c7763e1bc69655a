'''
Author: Lucas Rath

Exceptions raised by the matrix-variate distributions
'''

import numpy as np


class CovPriorError(Exception):
    ''' Base class of all errors raised by covprior '''


class InvalidParameter(CovPriorError, ValueError):
    ''' The (degree of freedom, scale matrix) pair is not a valid parameter set '''


class DimensionMismatch(CovPriorError, ValueError):
    ''' A matrix argument does not have the dimensions of the scale matrix '''


class DecompositionFailure(CovPriorError, np.linalg.LinAlgError):
    ''' Cholesky factorization failed, i.e. the matrix is not positive definite '''
