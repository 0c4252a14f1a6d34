CUBOID_AREA_ENTRY = "cuboid_area"

CUBOID_AREA_SOURCE = """
__kernel void cuboid_area(__global const int *a,
                          __global const int *b,
                          __global const int *c,
                          __global int *result)
{
    int i = get_global_id(0);
    result[i] = 2 * ((a[i] * b[i]) + (b[i] * c[i]) + (a[i] * c[i]));
}
"""
